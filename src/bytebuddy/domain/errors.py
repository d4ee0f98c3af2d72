"""Domain errors raised by stores and services."""


class ByteBuddyError(Exception):
    """Base error carrying a user-facing message."""

    default_message = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        """Return the user-facing message."""
        return str(self)


class DuplicateUsernameError(ByteBuddyError):
    """Raised when registering a username that is already taken."""

    default_message = "An account with this username already exists."


class AccountNotFoundError(ByteBuddyError):
    """Raised when no account matches a username."""

    default_message = "No account found with this username."


class InvalidCredentialError(ByteBuddyError):
    """Raised when a secret does not match the stored credential."""

    default_message = "Incorrect password."


class InvalidAmountError(ByteBuddyError):
    """Raised when a water amount is not positive."""

    default_message = "Amount must be greater than zero."


class InvalidInputError(ByteBuddyError):
    """Raised when required form input is missing or malformed."""

    default_message = "Invalid input."


class UnknownConversationError(ByteBuddyError):
    """Raised when a conversation id is not in the account namespace."""

    default_message = "Conversation not found."

    def __init__(self, conversation_id: str) -> None:
        super().__init__(f"Conversation not found: {conversation_id}")
        self.conversation_id = conversation_id


class GenerationError(ByteBuddyError):
    """Raised when the text-generation service fails."""

    default_message = "Text generation failed."


class PlanContractError(GenerationError):
    """Raised when a generated plan does not follow the required format."""

    default_message = "Generated plan does not follow the required format."


class RequestInFlightError(ByteBuddyError):
    """Raised when the same logical action is already running."""

    default_message = "This request is already in progress."


class NotSignedInError(ByteBuddyError):
    """Raised when an account-scoped action runs without a session."""

    default_message = "User not authenticated."
