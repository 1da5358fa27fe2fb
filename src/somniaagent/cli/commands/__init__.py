"""CLI 명령"""
