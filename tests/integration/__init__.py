"""Integration tests for the GIA research workflow.

These tests verify end-to-end functionality including:
- Complete workflow execution with mock LLM
- HITL simulation
- Persistence and resume
- Error recovery and fallbacks
- Streaming functionality
"""
