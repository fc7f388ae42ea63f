from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    # 가격 계산
    ROUND_UNIT: int = 1000
    ALLOWED_ROUND_UNITS: list[int] = [100, 1000, 10000]
    DEFAULT_BASE_SHOTS: int = 100
    SHOT_ROUND_DIVISOR: int = 100   # 샷당가 반올림 단위 = ROUND_UNIT / 이 값

    # 앱 설정
    MAX_FILE_SIZE_MB: int = 10
    TEMP_DIR: str = "./temp"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def outputs_dir(self) -> Path:
        return Path(self.TEMP_DIR) / "outputs"


settings = Settings()

# Excel 출력 디렉토리 자동 생성
settings.outputs_dir.mkdir(parents=True, exist_ok=True)
