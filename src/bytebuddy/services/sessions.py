"""Session lifecycle and the account-scoped workspace."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from bytebuddy.domain.accounts import Account
from bytebuddy.domain.errors import NotSignedInError
from bytebuddy.domain.logs import MealLog, MealType
from bytebuddy.domain.profiles import Profile
from bytebuddy.services.accounts import AccountService
from bytebuddy.services.chat import ChatService
from bytebuddy.services.conversations import (
    ConversationRepository,
    ConversationService,
)
from bytebuddy.services.generation import GenerationService
from bytebuddy.services.inflight import InFlightGuard
from bytebuddy.services.logs import DailyLogService, LogRepository
from bytebuddy.services.planning import PlanService
from bytebuddy.services.profiles import ProfileRepository, ProfileService

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class Workspace:
    """Stores and services bound to one signed-in account."""

    account: Account
    profiles: ProfileService
    conversations: ConversationService
    logs: DailyLogService
    chat: ChatService
    plans: PlanService
    generation: GenerationService
    guard: InFlightGuard

    @property
    def profile(self) -> Profile | None:
        return self.profiles.get(self.account.id)

    def save_profile(self, profile: Profile) -> None:
        self.profiles.save(self.account.id, profile)

    async def log_meal(
        self, description: str, quantity: str, meal_type: MealType
    ) -> MealLog:
        """Log a meal with an AI calorie estimate, one submission at a time."""
        with self.guard.hold(("meal", self.account.id)):
            return await self.logs.log_meal(
                description,
                quantity,
                meal_type,
                self.generation.estimate_calories,
            )

    def detach(self) -> None:
        """Drop pending work and stop the stores from writing."""
        self.chat.cancel_background()
        self.conversations.detach()
        self.logs.detach()

    async def close(self) -> None:
        """Wait for background work started by this workspace."""
        await self.chat.drain()


@dataclass
class SessionManager:
    """Signs accounts in and out and owns the active workspace.

    Every sign-in builds a fresh workspace from the account-scoped stores, so
    nothing cached for one account survives into the next session.
    """

    accounts: AccountService
    profile_repository: ProfileRepository
    conversation_repository: ConversationRepository
    log_repository: LogRepository
    generation: GenerationService
    timezone_name: str = "UTC"
    water_goal_ml: int = 2500
    calorie_goal_kcal: int = 2000
    clock: Callable[[], datetime] = field(default=_utc_now)
    _workspace: Workspace | None = field(default=None, init=False, repr=False)

    @property
    def workspace(self) -> Workspace | None:
        return self._workspace

    def require_workspace(self) -> Workspace:
        """Return the active workspace or raise when signed out."""
        if self._workspace is None:
            raise NotSignedInError()
        return self._workspace

    def sign_up(self, name: str, username: str, secret: str) -> Workspace:
        """Register a new account and open its workspace."""
        return self._attach(self.accounts.register(name, username, secret))

    def sign_in(self, username: str, secret: str) -> Workspace:
        """Authenticate and open the account's workspace."""
        return self._attach(self.accounts.authenticate(username, secret))

    def restore(self) -> Workspace | None:
        """Reopen the workspace of a persisted, still-valid session."""
        account = self.accounts.restore_session()
        if account is None:
            return None
        return self._attach(account)

    def sign_out(self) -> None:
        """End the session and detach all account-scoped state."""
        self.accounts.end_session()
        self._detach()

    def _detach(self) -> None:
        if self._workspace is not None:
            self._workspace.detach()
            self._workspace = None

    def _attach(self, account: Account) -> Workspace:
        self._detach()
        guard = InFlightGuard()
        profiles = ProfileService(self.profile_repository)
        conversations = ConversationService(
            account_id=account.id,
            repository=self.conversation_repository,
            clock=self.clock,
        )
        logs = DailyLogService(
            account_id=account.id,
            repository=self.log_repository,
            timezone_name=self.timezone_name,
            water_goal_ml=self.water_goal_ml,
            calorie_goal_kcal=self.calorie_goal_kcal,
            clock=self.clock,
        )
        self._workspace = Workspace(
            account=account,
            profiles=profiles,
            conversations=conversations,
            logs=logs,
            chat=ChatService(
                account_id=account.id,
                conversations=conversations,
                profiles=profiles,
                generation=self.generation,
                guard=guard,
            ),
            plans=PlanService(
                account_id=account.id,
                profiles=profiles,
                generation=self.generation,
                guard=guard,
            ),
            generation=self.generation,
            guard=guard,
        )
        _logger.info("Opened workspace for account %s", account.id)
        return self._workspace
