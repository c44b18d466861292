"""
SprintPulse - Sprint management backend with AI-assisted analytics

This package contains the backend services:
- api: FastAPI REST endpoints
- engine: Analytics services (velocity, forecasting, dashboards, planning)
- agents: Generative-text client, prompts and response schemas
- storage: Relational store adapter, models and repositories
- platform: Cross-cutting concerns (config, logging)
"""

__version__ = "0.1.0"
