"""Somnia Agent CLI"""
