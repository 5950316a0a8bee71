from plan_engine.config.settings import EngineSettings, settings

__all__ = ["EngineSettings", "settings"]
