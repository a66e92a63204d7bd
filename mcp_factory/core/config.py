from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_name: str = "mcp-factory"
    api_host: str = "0.0.0.0"
    api_port: int = 3456

    database_url: str = "sqlite:///./data/mcp_factory.db"
    job_store: str = "memory"  # "memory" or "database"
    max_jobs: int = 500

    anthropic_api_key: str | None = None
    anthropic_api_base: str = "https://api.anthropic.com"
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_tokens: int = 4096
    llm_timeout: float = 120.0

    output_dir: str = "/opt/mcp-factory/output"
    packages_dir: str = "/opt/mcp-factory/packages"
    default_runtime: str = "typescript"

    tsc_timeout: float = 60.0
    lint_timeout: float = 30.0
    install_timeout: float = 300.0
    build_timeout: float = 300.0
    pack_timeout: float = 120.0
    docker_timeout: float = 600.0
    stage_timeout: float | None = None

    enable_docker: bool = False
    install_dependencies: bool = False

    # Finding categories that stop the pipeline at the validate stage.
    fatal_issue_categories: List[str] = [
        "filesystem",
        "typescript",
        "dependency",
        "declaration",
        "coverage",
        "transport",
    ]


settings = Settings()
