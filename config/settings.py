from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
from pathlib import Path

# Загружаем переменные из .env файла (или env.txt для тестирования)
env_file = ".env" if Path(".env").exists() else "env.txt"
load_dotenv(dotenv_path=env_file)


class Settings(BaseSettings):
    """
    Настройки приложения, загружаемые из переменных окружения.
    Pydantic-settings автоматически считывает переменные из .env файла.
    """
    model_config = SettingsConfigDict(
        env_file=env_file,
        env_file_encoding='utf-8',
        extra='ignore'
    )

    # RemoteStore (GraphQL)
    graphql_url: str = "http://localhost:8080/v1/graphql"
    graphql_token: str = ""
    request_timeout: float = 15.0
    max_retries: int = 3
    retry_delay: float = 1.0

    # Координатор мутаций
    mutation_timeout: Optional[float] = 30.0
    serialize_mutations: bool = True

    # Логирование
    log_level: str = "INFO"
    log_file: str = "logs/app.log"

    # Палитра для новых списков
    list_colors: List[str] = [
        "#3B82F6",  # синий
        "#EF4444",  # красный
        "#10B981",  # зеленый
        "#F59E0B",  # желтый
        "#8B5CF6",  # фиолетовый
        "#EC4899",  # розовый
        "#06B6D4",  # бирюзовый
        "#84CC16",  # лайм
        "#F97316",  # оранжевый
        "#6366F1",  # индиго
    ]

    def get_list_colors(self) -> List[str]:
        """Возвращает копию палитры цветов списков"""
        return self.list_colors.copy()


settings = Settings()
