from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Any, Iterable, List
import logging
from models.test_case import AgentResponse

logger = logging.getLogger(__name__)

class BaseAgent(ABC):
    """Base class for QA agents: config access, uniform responses and run statistics"""

    def __init__(self, name: str, config: Dict[str, Any] = None):
        self.name = name
        self.config = config or {}
        self.logger = logging.getLogger(f"Agent.{name}")
        self.stats: Dict[str, Any] = {
            'runs': 0,
            'failures': 0,
            'last_run': None
        }

    @abstractmethod
    def process(self, input_data: Any) -> AgentResponse:
        """Process input data and return response"""
        pass

    def missing_keys(self, input_data: Any, required: Iterable[str]) -> List[str]:
        """Required keys absent from a dict input; every key when the input is not a dict"""
        if not isinstance(input_data, dict):
            self.logger.error(f"Invalid input type. Expected dict, got {type(input_data)}")
            return list(required)
        return [key for key in required if input_data.get(key) in (None, "", [])]

    def create_success_response(self, message: str, data: Dict[str, Any] = None) -> AgentResponse:
        self._record_run(success=True)
        return AgentResponse(success=True, message=message, data=data or {})

    def create_error_response(self, message: str, error: str = None) -> AgentResponse:
        self._record_run(success=False)
        return AgentResponse(success=False, message=message, error=error or message)

    def _record_run(self, success: bool):
        self.stats['runs'] += 1
        if not success:
            self.stats['failures'] += 1
        self.stats['last_run'] = datetime.now().isoformat()

    def log_operation(self, operation: str, details: Dict[str, Any] = None):
        self.logger.info(f"Agent {self.name} - {operation}: {details or {}}")

    def get_config(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def get_status(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'config': {key: value for key, value in self.config.items() if 'key' not in key.lower()},
            'stats': dict(self.stats),
            'status': 'active'
        }
