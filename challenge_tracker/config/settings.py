# challenge_tracker/config/settings.py
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # MySQL 접속 정보 (database_url이 있으면 그걸 우선 사용)
    db_user: str = "root"
    db_pass: str = ""
    db_host: str = "localhost"
    db_port: Optional[int] = 3306
    db_name: str = "challenge_tracker"
    database_url: Optional[str] = None

    # 호출자 식별용 JWT (발급은 인증 서버 담당)
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"

    # '오늘' 계산 기준. 서버 시계가 틀린 환경이면 offset으로만 보정
    clock_timezone: str = "UTC"
    clock_offset_days: int = 0

    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]


settings = Settings()
