"""
somniaagent init 프로젝트 템플릿
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from ..core.types import AgentType, AutonomyLevel


@dataclass(frozen=True)
class Template:
    title: str
    description: str
    agent_type: AgentType
    autonomy: AutonomyLevel
    triggers: Tuple[str, ...]
    handler: str


_DEFI_HANDLER = '''
async def on_price_change(event):
    decision = await agent.ai.analyze(event)
    logger.info(f"{event.type}: {decision.action} ({decision.confidence:.2f}) - {decision.reasoning}")

    # 신뢰도가 높을 때만 실행
    if decision.action != "hold" and decision.confidence > CONFIDENCE_THRESHOLD:
        await agent.execute(decision.to_action())


agent.on_event("price_change", on_price_change)
agent.on_event("liquidity_event", on_price_change)
'''

_GAMING_HANDLER = '''
async def on_player_interaction(event):
    decision = await agent.ai.analyze(
        {"type": event.type, **(event.data or {}), "context": agent.get_state().data}
    )
    logger.info(f"NPC decision: {decision.action} - {decision.reasoning}")

    if decision.action != "hold":
        await agent.execute(decision.to_action())


agent.on_event("player_interaction", on_player_interaction)
'''

_CUSTOM_HANDLER = '''
async def on_event(event):
    # 이벤트 처리 로직 작성
    logger.info(f"Received {event.type}: {event.data}")


for trigger in agent.config.triggers:
    agent.on_event(trigger, on_event)
'''

TEMPLATES: Dict[str, Template] = {
    "defi-trading": Template(
        title="DeFi Trading Agent",
        description="Autonomous trading agent with AI-powered decisions",
        agent_type=AgentType.DEFI,
        autonomy=AutonomyLevel.HIGH,
        triggers=("price_change", "liquidity_event"),
        handler=_DEFI_HANDLER,
    ),
    "gaming-npc": Template(
        title="Gaming NPC Agent",
        description="Intelligent NPC with dynamic behavior",
        agent_type=AgentType.GAMING,
        autonomy=AutonomyLevel.MEDIUM,
        triggers=("player_interaction", "game_event"),
        handler=_GAMING_HANDLER,
    ),
    "custom": Template(
        title="Custom Agent",
        description="Blank template for custom agent",
        agent_type=AgentType.CUSTOM,
        autonomy=AutonomyLevel.MEDIUM,
        triggers=("custom_event",),
        handler=_CUSTOM_HANDLER,
    ),
}


_AGENT_MODULE = '''"""
{name} - Somnia Agent SDK로 만든 에이전트

실행: python agent.py
시뮬레이션: somniaagent test
"""

import asyncio
import logging

from somniaagent import Agent
from somniaagent.cli.project import load_agent_config

CONFIDENCE_THRESHOLD = 0.7

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("{name}")

agent = Agent(load_agent_config("agent.yaml"))
{handler}

async def main():
    await agent.init()
    await agent.start()
    logger.info("Agent is running (Ctrl+C to stop)")
    try:
        await asyncio.Event().wait()
    finally:
        await agent.stop()
        await agent.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
'''

_ENV_EXAMPLE = """# Somnia Network Configuration
PRIVATE_KEY=your_private_key_here
SOMNIA_NETWORK=testnet
SOMNIA_TESTNET_RPC=https://50312.rpc.thirdweb.com
SOMNIA_MAINNET_RPC=https://api.infra.mainnet.somnia.network

# AI Configuration
SOMNIA_AI_ENDPOINT=http://localhost:11434
SOMNIA_AI_MODEL=llama3
"""

_README = """# {name}

{title} built with Somnia Agent SDK.

## Quick Start

```bash
cp .env.example .env          # set PRIVATE_KEY
somniaagent test              # run against simulated events
somniaagent deploy --mock     # offline deployment rehearsal
somniaagent deploy --network testnet --bytecode-file Agent.bin
python agent.py               # run the agent
```
"""


def render_project(name: str, template_key: str) -> Dict[str, str]:
    """템플릿 파일 내용 생성 (agent.yaml 제외) → {파일명: 내용}"""
    template = TEMPLATES[template_key]
    return {
        "agent.py": _AGENT_MODULE.format(name=name, handler=template.handler),
        ".env.example": _ENV_EXAMPLE,
        "README.md": _README.format(name=name, title=template.title),
    }
