"""
Interactive nickname checking: validation, debouncing and stale-result filtering
"""
from typing import Callable, List, Optional
from ..config import config
from ..constants import ErrorConstants
from ..debounce import DebounceCoordinator
from ..error_handler import error_handler
from ..exceptions import NetworkError
from ..logger import availability_logger as logger
from ..models.nickname import CheckResult, CheckStatus
from ..validation_utils import normalize_nickname
from ..validators.nickname import NicknameValidator, nickname_validator
from .availability_service import NicknameAvailabilityService


async def check_nickname(service: NicknameAvailabilityService, nickname: str,
                         current_nickname: Optional[str] = None, caller_id: Optional[str] = None,
                         validator: NicknameValidator = nickname_validator,
                         on_checking: Callable[[], None] = None) -> CheckResult:
    """
    Run one complete check and map the outcome to a CheckResult

    Validation failures and the caller's own nickname are answered
    locally. Failures from the service become an error result with a
    message fit for display.

    Args:
        service: Availability service
        nickname: Nickname as typed
        current_nickname: Nickname the caller already owns
        caller_id: Identity used for per-caller rate limiting
        validator: Rule validator
        on_checking: Called right before the service is consulted

    Returns:
        Terminal CheckResult (idle for blank input)
    """
    if not nickname or not nickname.strip():
        return CheckResult.idle()

    validation = validator.validate(nickname)
    if not validation.is_valid:
        return CheckResult.error(validation.error)

    if current_nickname and normalize_nickname(nickname) == normalize_nickname(current_nickname):
        return CheckResult.available(ErrorConstants.NICKNAME_CURRENT)

    if on_checking:
        on_checking()

    try:
        availability = await service.check_availability(nickname, current_nickname, caller_id)
    except Exception as error:
        app_error = error_handler.classify(error, 'check_nickname')
        if isinstance(app_error, NetworkError):
            return CheckResult.error(ErrorConstants.CONNECTION_ERROR, is_valid=True)
        return CheckResult.error(app_error.message, is_valid=True)

    if availability.is_available:
        return CheckResult.available()
    return CheckResult.unavailable(availability.error or ErrorConstants.NICKNAME_UNAVAILABLE)


class NicknameCheck:
    """
    Live availability state for a nickname input field

    Feed every edit to set_input(). Checks are debounced, and a result is
    only published if no newer check started while it was in flight.
    Subscribers are called with each new CheckResult.
    """

    def __init__(self, service: NicknameAvailabilityService, current_nickname: Optional[str] = None,
                 debounce_delay: float = None, caller_id: Optional[str] = None,
                 validator: NicknameValidator = nickname_validator):
        self.service = service
        self.current_nickname = current_nickname
        self.caller_id = caller_id
        self.validator = validator
        self.value = ''
        self.result = CheckResult.idle()
        self.generation = 0
        self._subscribers: List[Callable[[CheckResult], None]] = []
        delay = debounce_delay if debounce_delay is not None else config.debounce_delay
        self._debouncer = DebounceCoordinator(self._run_check, delay)

    @property
    def status(self) -> CheckStatus:
        return self.result.status

    @property
    def message(self) -> Optional[str]:
        return self.result.message

    @property
    def is_valid(self) -> bool:
        return self.result.is_valid

    @property
    def is_available(self) -> bool:
        return self.result.is_available

    def subscribe(self, callback: Callable[[CheckResult], None]) -> Callable[[], None]:
        """Register a state listener; returns a function that removes it"""
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback)

    def _publish(self, result: CheckResult) -> None:
        if result == self.result:
            return
        self.result = result
        for callback in list(self._subscribers):
            callback(result)

    def set_input(self, value: str) -> None:
        """Record an edit; blank input resets immediately, anything else is debounced"""
        self.value = value
        if not value or not value.strip():
            self.reset()
            return
        self._debouncer.push(value)

    def reset(self) -> None:
        """Back to idle; any check still in flight is ignored when it lands"""
        self._debouncer.cancel()
        self.generation += 1
        self._publish(CheckResult.idle())

    def close(self) -> None:
        self._debouncer.cancel()

    async def drain(self) -> None:
        """Wait for checks that already started"""
        await self._debouncer.drain()

    async def _run_check(self, value: str) -> None:
        self.generation += 1
        generation = self.generation

        result = await check_nickname(
            self.service, value, self.current_nickname, self.caller_id, self.validator,
            on_checking=lambda: self._publish(CheckResult.checking())
        )

        if generation != self.generation:
            logger.debug("Discarding superseded nickname check", generation=generation,
                         latest_generation=self.generation)
            return
        self._publish(result)
