"""
Domain error taxonomy.

Every failure in a single user operation is one of these. Routes catch
them at the blueprint boundary and turn them into a flash notice, a 403
or a 404; nothing here is fatal to the process.
"""


class RecipeShareError(Exception):
    """Base class for errors scoped to one attempted operation."""

    #: Message safe to show to the end user.
    public_message = 'Something went wrong. Please try again.'

    def __init__(self, message=None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(RecipeShareError):
    """Input rejected before any persistence call was issued."""

    public_message = 'The submitted data is not valid.'


class AuthenticationRequiredError(RecipeShareError):
    """The operation needs a signed-in user."""

    public_message = 'Please log in to continue.'


class PermissionDeniedError(RecipeShareError):
    """The signed-in user does not own the targeted record."""

    public_message = "You don't have permission to do that."


class NotFoundError(RecipeShareError):
    """The targeted recipe, comment, category or user does not exist."""

    public_message = 'The requested item could not be found.'


class TransientError(RecipeShareError):
    """Storage failure. Surfaced immediately; never retried automatically."""

    public_message = 'The service is temporarily unavailable. Please try again.'


class AlreadyFavoritedError(RecipeShareError):
    """Duplicate favorite for the same (user, recipe) pair."""

    public_message = 'Recipe is already in your favorites'
