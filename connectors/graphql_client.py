import asyncio
import httpx
from typing import Any, Dict, Optional

from config.settings import settings
from connectors.operations import DOCUMENTS
from connectors.remote_store import RemoteStore
from models.result_models import RemoteResult
from utils.logger import get_logger

logger = get_logger(__name__)


class GraphQLClient(RemoteStore):
    """
    Асинхронный клиент RemoteStore поверх GraphQL-эндпоинта.
    """
    def __init__(self, url: Optional[str] = None, token: Optional[str] = None):
        self.url = url or settings.graphql_url
        self.api_token = settings.graphql_token if token is None else token
        self.headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        }
        if self.api_token:
            self.headers['Authorization'] = f'Bearer {self.api_token}'

    async def _request(self, payload: Dict[str, Any]) -> RemoteResult:
        """
        Выполняет POST-запрос с повторами при сетевых ошибках.
        Ошибки HTTP-статуса не повторяются.
        """
        retries = max(1, settings.max_retries)
        for attempt in range(1, retries + 1):
            async with httpx.AsyncClient(headers=self.headers, timeout=settings.request_timeout) as client:
                try:
                    response = await client.post(self.url, json=payload)
                    response.raise_for_status()
                    return self._parse_body(response.json())
                except httpx.HTTPStatusError as e:
                    logger.error(f"Ошибка ответа GraphQL API: {e.response.status_code} - {e.response.text}")
                    return RemoteResult(error=f"Remote store responded with HTTP {e.response.status_code}")
                except httpx.RequestError as e:
                    logger.warning(f"Попытка {attempt}/{retries} запроса к GraphQL API не удалась: {e}")
                    if attempt == retries:
                        logger.error(f"Все попытки запроса к GraphQL API исчерпаны: {e}")
                        return RemoteResult(error=f"Remote store unreachable: {e}")
                except ValueError as e:
                    logger.error(f"Некорректный JSON в ответе GraphQL API: {e}")
                    return RemoteResult(error="Malformed response from remote store")

            delay = settings.retry_delay * attempt
            logger.debug(f"Ожидание {delay} c перед повтором...")
            await asyncio.sleep(delay)

        return RemoteResult(error="Remote store unreachable")

    @staticmethod
    def _parse_body(body: Any) -> RemoteResult:
        if not isinstance(body, dict):
            return RemoteResult(error="Malformed response from remote store")

        errors = body.get('errors')
        if errors:
            messages = [err.get('message', 'Unknown error') for err in errors if isinstance(err, dict)]
            return RemoteResult(error="; ".join(messages) or "Unknown error")

        return RemoteResult(data=body.get('data') or {})

    async def execute(self, operation: str, variables: Optional[Dict[str, Any]] = None) -> RemoteResult:
        document = DOCUMENTS.get(operation)
        if document is None:
            logger.error(f"Неизвестная операция RemoteStore: {operation}")
            return RemoteResult(error=f"Unknown operation: {operation}")

        logger.debug(f"GraphQL {operation}: {variables}")
        payload = {
            'query': document,
            'variables': variables or {},
            'operationName': operation,
        }
        return await self._request(payload)
