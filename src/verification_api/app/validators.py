"""Input rules for POST /enqueue.

Every check runs before the queue program is invoked. Rules are applied in
order and the first failure raises ValidationError with a message naming the
rule, which the API returns to the caller unchanged.
"""

from __future__ import annotations

import string

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import EnqueueRequest

REPO_ALLOWED_CHARS = frozenset(string.ascii_letters + string.digits + ".-_@:/")
CHAIN_ID_ALLOWED_CHARS = frozenset(string.ascii_letters + string.digits + ".-_")
COMMIT_ALIASES = {"main", "master"}
COMMIT_MIN_LENGTH = 4
COMMIT_MAX_LENGTH = 40
CHAIN_ID_MAX_LENGTH = 64
CODE_ID_MAX = 65535

_url_adapter = TypeAdapter(AnyUrl)


def validate_repo(repo: str) -> None:
    if not (repo.startswith("git@") or repo.startswith("https://")):
        raise ValidationError("Repository must start with git@ or https://")
    if repo.startswith("https://") and not repo.endswith(".git"):
        raise ValidationError("Repository must end with .git")
    if not all(char in REPO_ALLOWED_CHARS for char in repo):
        raise ValidationError(
            "Repository must only contain alphanumeric characters, ., -, _, @, : or /"
        )
    if ".." in repo:
        raise ValidationError("Repository must not contain ..")
    if not _is_valid_url(_scp_to_ssh_url(repo)):
        raise ValidationError("Repository must be a valid URL")


def validate_commit(commit: str) -> None:
    # Hex-only commits are intentionally not enforced; branch and tag names pass.
    if commit == "HEAD" or commit.lower() in COMMIT_ALIASES:
        return
    if len(commit) < COMMIT_MIN_LENGTH:
        raise ValidationError(f"Commit must be at least {COMMIT_MIN_LENGTH} characters long")
    if len(commit) > COMMIT_MAX_LENGTH:
        raise ValidationError(f"Commit must be at most {COMMIT_MAX_LENGTH} characters long")


def validate_optimizer(version: str) -> None:
    parts = version.split(".")
    if len(parts) != 3:
        raise ValidationError("Optimizer version must have exactly three parts, e.g. 1.0.10")
    for part in parts:
        # Empty parts ("1..0") are rejected along with non-digits.
        if not part or not (part.isascii() and part.isdigit()):
            raise ValidationError("Optimizer version parts must only contain digits")


def validate_code_id(code_id: int) -> None:
    if not 0 <= code_id <= CODE_ID_MAX:
        raise ValidationError(f"Code id must be between 0 and {CODE_ID_MAX}")


def validate_chain_id(chain_id: str) -> None:
    if not chain_id:
        raise ValidationError("Chain id must not be empty")
    if len(chain_id) > CHAIN_ID_MAX_LENGTH:
        raise ValidationError(f"Chain id must be at most {CHAIN_ID_MAX_LENGTH} characters long")
    if not all(char in CHAIN_ID_ALLOWED_CHARS for char in chain_id):
        raise ValidationError("Chain id must only contain alphanumeric characters, ., - or _")


def validate_lcd(lcd: str) -> None:
    if not (lcd.startswith("http://") or lcd.startswith("https://")):
        raise ValidationError("LCD endpoint must start with http:// or https://")
    if not _is_valid_url(lcd):
        raise ValidationError("LCD endpoint must be a valid URL")


def validate_enqueue(job: EnqueueRequest) -> None:
    """Run every rule that applies to an enqueue request, in form-field order."""
    validate_repo(job.repo)
    validate_commit(job.commit)
    if job.optimizer is not None:
        validate_optimizer(job.optimizer)
    if job.code_id is not None:
        validate_code_id(job.code_id)
    if job.chain_id is not None:
        validate_chain_id(job.chain_id)
    if job.lcd is not None:
        validate_lcd(job.lcd)


def _scp_to_ssh_url(repo: str) -> str:
    """Rewrite `git@host:owner/name.git` as `ssh://git@host/owner/name.git`.

    The scp-like form is not a URL on its own; anything else is returned as-is.
    """
    if not repo.startswith("git@"):
        return repo
    host, separator, path = repo[len("git@") :].partition(":")
    if not separator:
        # No path separator; leave it for the URL parser to reject.
        return repo
    return f"ssh://git@{host}/{path.lstrip('/')}"


def _is_valid_url(value: str) -> bool:
    try:
        parsed = _url_adapter.validate_python(value)
    except PydanticValidationError:
        return False
    return bool(parsed.host)
