from pydantic_settings import BaseSettings

from powerflow.network.gauss_seidel import UpdateRule


class Settings(BaseSettings):
    model_config = {"env_prefix": "", "case_sensitive": False}

    # App
    environment: str = "development"
    debug: bool = True
    app_name: str = "SeidelFlow"
    log_json: bool = False
    cors_origins: str = "http://localhost:3000"

    # Gauss-Seidel solver defaults
    gs_max_iterations: int = 50
    gs_tolerance: float = 1e-6
    gs_update_rule: UpdateRule = UpdateRule.SIMPLIFIED


settings = Settings()
