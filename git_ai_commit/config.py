APP_NAME = "git-ai-commit"

DEFAULT_MODEL = "gemma3:4b"
DEFAULT_MAX_FILES = 10
DEFAULT_MAX_DIFF_LINES = 50
DEFAULT_PORT = 11434
DEFAULT_TIMEOUT_SECONDS = 60

DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 0.9
DEFAULT_NUM_PREDICT = 200

MAX_LINE_LENGTH = 100
MAX_UNTRACKED_SHOWN = 5

CONFIG_FILE_NAME = "config.yml"
CONFIG_PATH_ENV_VAR = "GIT_AI_COMMIT_CONFIG"
MODEL_ENV_VAR = "GIT_AI_COMMIT_MODEL"
HOST_ENV_VAR = "OLLAMA_HOST"

STAGED_HEADER = "Staged changes (will be committed):"
UNSTAGED_HEADER = "Unstaged changes (will NOT be committed):"
OVERFLOW_MARKER = "(+{count} more files not shown)"
TRUNCATION_MARKER = "... (diff truncated, {count} more lines)"

CONFIG_FILE_NAMES = (
    "package.json",
    "cargo.toml",
    "pyproject.toml",
    "setup.cfg",
    "requirements.txt",
    "dockerfile",
    "docker-compose.yml",
    "makefile",
    ".gitignore",
    "readme.md",
    "license",
    "changelog.md",
)

SYSTEM_PROMPT = """
## ROLE
You write git commit messages. You answer with the commit message only: no
preamble, no explanation, no markdown fences.

## RULES
- Use the Conventional Commits format:
    <type>[optional scope]: <description>

    [optional body]

    [optional footer(s)]
- Types: feat, fix, docs, style, refactor, perf, test, build, ci, chore.
- Keep the subject line under 50 characters, in the imperative mood.
- Every line must be 100 characters or fewer.
- Describe only the changes that are staged for commit.
"""

DEFAULT_TEMPLATE = """You are an expert software developer creating a git commit message.

Based on the following git repository changes, generate a concise, descriptive commit message that follows conventional commit format.

Repository Context:
{context}

Guidelines for the commit message:
1. Use conventional commit format: type(scope): description
2. Types: feat, fix, docs, style, refactor, test, chore
3. Keep the first line under 50 characters
4. Be specific about what changed and why
5. Use imperative mood (e.g., "add" not "added")
6. Focus on the most significant changes
7. If there are breaking changes, mention them
8. For config file changes, use "chore" type
9. For test changes, use "test" type
10. Only include changes that are staged for commit in the commit message

Generate only the commit message, no additional explanation:"""
