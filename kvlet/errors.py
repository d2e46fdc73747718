"""kvlet error types.

Every error is raised by a precondition check before any mutation, so an
operation that raises has left the repository untouched. Each class carries
the one-line message the command line prints for it.
"""


class VCSError(Exception):
    """Base class for all repository errors.

    Subclasses set ``message``; passing an explicit message overrides it.
    """

    message = "Repository error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class NotFound(VCSError):
    """Raised when a lookup (blob hash, commit message) matches nothing."""

    message = "Found no commit with that message."


class NoChanges(VCSError):
    message = "No changes added to the commit."


class EmptyMessage(VCSError):
    message = "Please enter a commit message."


class NotTracked(VCSError):
    message = "No reason to remove the file."


class NoSuchFile(VCSError):
    message = "File does not exist."


class InvalidFileName(VCSError):
    """Raised for names that are not a plain file directly in the working tree."""

    message = "Invalid file name."


class NoSuchCommit(VCSError):
    message = "No commit with that id exists."


class NotFoundInCommit(VCSError):
    message = "File does not exist in that commit."


class NoSuchBranch(VCSError):
    message = "No such branch exists."


class BranchExists(VCSError):
    message = "A branch with that name already exists."


class CannotRemoveCurrent(VCSError):
    message = "Cannot remove the current branch."


class WouldOverwriteUntracked(VCSError):
    """Raised when a checkout, reset or merge would clobber an untracked file.

    Attributes:
        names: The untracked working-tree files that are in the way.
    """

    message = (
        "There is an untracked file in the way; "
        "delete it, or add and commit it first."
    )

    def __init__(self, names: set[str] | None = None) -> None:
        self.names = names or set()
        super().__init__()


class UncommittedChanges(VCSError):
    message = "You have uncommitted changes."


class SelfMerge(VCSError):
    message = "Cannot merge a branch with itself."


class NoOp(VCSError):
    message = "No need to checkout the current branch."


class IncorrectOperands(VCSError):
    message = "Incorrect operands."


class NotInitialized(VCSError):
    message = "Not in an initialized kvlet directory."


class AlreadyInitialized(VCSError):
    message = (
        "A kvlet version-control system already exists in the current directory."
    )


class UnknownCommand(VCSError):
    message = "No command with that name exists."


class MissingCommand(VCSError):
    message = "Please enter a command."
