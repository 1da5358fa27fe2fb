"""
에이전트 프로젝트 파일 (agent.yaml, 배포 기록)
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..core.exceptions import AgentError
from ..core.types import AgentConfig, DeploymentResult, now_ms


CONFIG_FILE = "agent.yaml"
STATE_DIR = ".somniaagent"
DEPLOYMENTS_FILE = "deployments.yaml"


def load_agent_config(path: Union[str, Path] = CONFIG_FILE) -> AgentConfig:
    """
    agent.yaml 로드

    Raises:
        AgentError(CONFIGURATION): 파일이 없거나 형식이 잘못된 경우
    """
    path = Path(path)
    if not path.exists():
        raise AgentError.configuration(
            f"Agent config not found: {path} (run 'somniaagent init' first)"
        )
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise AgentError.configuration(f"Invalid YAML in {path}: {e}", cause=e) from e

    if not isinstance(data, dict):
        raise AgentError.configuration(f"{path} must contain a mapping")
    return AgentConfig.from_dict(data)


def write_agent_config(path: Union[str, Path], config: AgentConfig) -> None:
    data = config.to_dict()
    data = {key: value for key, value in data.items() if value not in (None, [], "")}
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)


def deployments_path(project_dir: Union[str, Path] = ".") -> Path:
    return Path(project_dir) / STATE_DIR / DEPLOYMENTS_FILE


def load_deployments(project_dir: Union[str, Path] = ".") -> List[Dict[str, Any]]:
    """배포 기록 목록 (없으면 빈 목록)"""
    path = deployments_path(project_dir)
    if not path.exists():
        return []
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return list(data.get("deployments") or [])


def record_deployment(
    config: AgentConfig,
    result: DeploymentResult,
    project_dir: Union[str, Path] = ".",
    mock: bool = False,
) -> Dict[str, Any]:
    """배포 결과를 .somniaagent/deployments.yaml에 추가"""
    entry = {
        "name": config.name,
        "type": config.type.value,
        "address": result.contract_address,
        "tx_hash": result.tx_hash,
        "network": result.network.name,
        "chain_id": result.network.chain_id,
        "block_number": result.block_number,
        "gas_used": result.gas_used,
        "deployed_at": result.timestamp,
        "mock": mock,
    }
    deployments = load_deployments(project_dir)
    deployments.append(entry)

    path = deployments_path(project_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        yaml.safe_dump({"deployments": deployments}, f, sort_keys=False)
    tmp.replace(path)
    return entry


def format_age(timestamp_ms: Optional[int]) -> str:
    """배포 이후 경과 시간 (예: "2 days ago")"""
    if not timestamp_ms:
        return "unknown"
    seconds = max(0, (now_ms() - int(timestamp_ms)) // 1000)
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "just now"
