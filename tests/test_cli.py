import importlib
import json
import subprocess
from pathlib import Path
from unittest.mock import Mock

import pytest
from click.testing import CliRunner

from gitmoji_msg.llm.providers import LLMError
from gitmoji_msg.vcs.git_client import FileChange, GitClient, GitError


cli = importlib.import_module("gitmoji_msg.cli")


STAGED_DIFF = (
    "diff --git a/src/auth.py b/src/auth.py\n"
    "--- a/src/auth.py\n"
    "+++ b/src/auth.py\n"
    "@@ -1 +1,2 @@\n"
    "-token = None\n"
    "+def login(user):\n"
    "+    return user\n"
)


def suggestion(message, gitmoji="✨", code=":sparkles:", scope=None, description=None, confidence=90):
    return {
        "gitmoji": gitmoji,
        "gitmoji_code": code,
        "scope": scope,
        "message": message,
        "description": description,
        "confidence": confidence,
    }


class FakeRepo:
    def __init__(self):
        self.root = Path("/repo")
        self.staged_files = ["src/auth.py"]
        self.staged_diff = STAGED_DIFF
        self.working_diff = ""
        self.changes = [FileChange("src/auth.py", "M", " ")]
        self.added = 0
        self.commits = []

    def get_changes(self):
        return self.changes

    def get_staged_files(self):
        return self.staged_files

    def get_staged_diff(self):
        return self.staged_diff

    def get_working_diff(self):
        return self.working_diff

    def add_all(self):
        self.added += 1

    def commit(self, message):
        self.commits.append(message)

    def get_last_commit(self):
        return "abc1234", self.commits[-1].splitlines()[0]


@pytest.fixture
def repo(monkeypatch):
    fake = FakeRepo()
    git_client_cls = Mock(return_value=fake)
    git_client_cls.find_repo_root.return_value = fake.root
    monkeypatch.setattr(cli, "GitClient", git_client_cls)
    fake.client_cls = git_client_cls
    return fake


@pytest.fixture
def llm(monkeypatch):
    client = Mock()
    client.generate_structured.return_value = {
        "suggestions": [suggestion("add login helper", scope="auth", description="Adds a login entry point.")]
    }
    factory = Mock(return_value=client)
    monkeypatch.setattr(cli, "get_client", factory)
    client.factory = factory
    return client


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")


def invoke(args, input=None):
    return CliRunner().invoke(cli.main, args, input=input)


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------

def test_generate_missing_key_fails_before_git_or_llm(repo, llm):
    result = invoke(["generate"])
    assert result.exit_code == cli.EXIT_CONFIG_ERROR
    assert "OPENAI_API_KEY" in result.output
    repo.client_cls.find_repo_root.assert_not_called()
    llm.factory.assert_not_called()


def test_generate_outside_repository(repo, llm, api_key):
    repo.client_cls.find_repo_root.return_value = None
    result = invoke(["generate"])
    assert result.exit_code == cli.EXIT_NO_REPO
    assert "Not a git repository" in result.output


def test_generate_nothing_staged_skips_llm(repo, llm, api_key):
    repo.staged_files = []
    result = invoke(["generate"])
    assert result.exit_code == cli.EXIT_NO_CHANGES
    assert "No staged changes found" in result.output
    llm.factory.assert_not_called()


def test_generate_prints_message_and_command(repo, llm, api_key):
    result = invoke(["generate", "--no-interactive"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert "Found changes in 1 file(s): py" in result.output
    assert "Title: ✨ (auth): add login helper" in result.output
    assert "Description: Adds a login entry point." in result.output
    assert "Confidence: 90%" in result.output
    assert "git commit -m '✨ (auth): add login helper' -m 'Adds a login entry point.'" in result.output
    assert repo.commits == []
    llm.factory.assert_called_once_with("openai", "gpt-4o-mini", "sk-test")


def test_generate_commit_with_scope_override(repo, llm, api_key):
    result = invoke(["generate", "--commit", "--scope", "api", "--model", "gpt-4o"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert repo.commits == ["✨ (api): add login helper\n\nAdds a login entry point."]
    assert 'Commit: abc1234 "✨ (api): add login helper"' in result.output
    llm.factory.assert_called_once_with("openai", "gpt-4o", "sk-test")


def test_generate_commit_dry_run_does_not_commit(repo, llm, api_key):
    result = invoke(["generate", "--commit", "--dry-run"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert repo.commits == []
    assert "git commit -m" in result.output


def test_generate_auto_commit_from_config(repo, llm, api_key, isolate_user_config):
    isolate_user_config.write_text(json.dumps({"autoCommit": True}))
    result = invoke(["generate"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert len(repo.commits) == 1


def test_generate_interactive_choice(repo, llm, api_key):
    llm.generate_structured.return_value = {
        "suggestions": [
            suggestion("add login helper"),
            suggestion("fix login flow", gitmoji="🐛", code=":bug:", confidence=60),
        ]
    }
    result = invoke(["generate"], input="2\n")
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert "1. ✨ add login helper (90% confidence)" in result.output
    assert "2. 🐛 fix login flow (60% confidence)" in result.output
    assert "Title: 🐛 fix login flow" in result.output


def test_generate_interactive_disabled_takes_first(repo, llm, api_key):
    llm.generate_structured.return_value = {
        "suggestions": [suggestion("first"), suggestion("second")]
    }
    result = invoke(["generate", "--no-interactive"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert "Title: ✨ first" in result.output
    assert "Choose your commit message" not in result.output


def test_generate_llm_failure(repo, llm, api_key):
    llm.generate_structured.side_effect = LLMError("openai returned status 500: boom")
    result = invoke(["generate"])
    assert result.exit_code == cli.EXIT_LLM_FAILURE
    assert "AI generation failed" in result.output
    assert "boom" in result.output


def test_generate_provider_flag(repo, llm, monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ak")
    result = invoke(["generate", "-p", "anthropic", "-m", "claude-3-5-haiku-latest", "--no-interactive"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    llm.factory.assert_called_once_with("anthropic", "claude-3-5-haiku-latest", "ak")


def test_generate_git_failure(repo, llm, api_key):
    repo.get_staged_files = Mock(side_effect=GitError("fatal: bad revision"))
    result = invoke(["generate"])
    assert result.exit_code == cli.EXIT_VCS_FAILURE
    assert "bad revision" in result.output


@pytest.fixture
def git_process(monkeypatch):
    """Run the real GitClient against canned ``git`` process results."""
    outputs = {
        ("diff", "--cached", "--name-only"): subprocess.CompletedProcess([], 0, "src/auth.py\n", ""),
        ("diff", "--cached"): subprocess.CompletedProcess([], 0, STAGED_DIFF, ""),
    }

    def fake_run(cmd, **kwargs):
        return outputs[tuple(cmd[1:])]

    monkeypatch.setattr(GitClient, "find_repo_root", staticmethod(lambda start: Path("/repo")))
    monkeypatch.setattr(subprocess, "run", fake_run)
    return outputs


def test_verbose_shows_package_debug_logs(git_process, llm, api_key):
    result = invoke(["--verbose", "generate", "--no-interactive"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert "DEBUG: Executing Git command: git diff --cached" in result.output
    assert "DEBUG: Loaded configuration: provider=openai" in result.output


def test_debug_logs_hidden_without_verbose(git_process, llm, api_key):
    result = invoke(["generate", "--no-interactive"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert "DEBUG:" not in result.output


def test_git_errors_are_logged(git_process, llm, api_key):
    git_process[("diff", "--cached", "--name-only")] = subprocess.CompletedProcess(
        [], 128, "", "fatal: bad revision"
    )
    result = invoke(["generate"])
    assert result.exit_code == cli.EXIT_VCS_FAILURE
    assert "ERROR: Git command failed: git diff --cached" in result.output


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------

def test_run_clean_repository(repo, llm, api_key):
    repo.changes = []
    result = invoke(["run"])
    assert result.exit_code == cli.EXIT_SUCCESS
    assert "Repository is clean" in result.output
    llm.factory.assert_not_called()


def test_run_uses_existing_staged_changes(repo, llm, api_key):
    result = invoke(["run", "--no-interactive"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert "Using existing staged changes" in result.output
    assert repo.added == 0
    assert repo.commits == ["✨ (auth): add login helper\n\nAdds a login entry point."]


def test_run_stages_everything_with_yes(repo, llm, api_key):
    repo.changes = [FileChange("src/auth.py", " ", "M"), FileChange("notes.txt", "?", "?")]
    result = invoke(["run", "--yes", "--no-interactive"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert "📝 src/auth.py" in result.output
    assert "❓ notes.txt" in result.output
    assert repo.added == 1
    assert len(repo.commits) == 1


def test_run_confirmation_declined(repo, llm, api_key):
    repo.changes = [FileChange("src/auth.py", " ", "M")]
    result = invoke(["run"], input="n\n")
    assert result.exit_code == cli.EXIT_CANCELLED
    assert repo.added == 0
    llm.factory.assert_not_called()


def test_run_dry_run_analyses_working_tree(repo, llm, api_key):
    repo.changes = [FileChange("src/auth.py", " ", "M")]
    repo.working_diff = STAGED_DIFF
    repo.get_staged_files = Mock(side_effect=AssertionError("staging area must not be read"))
    result = invoke(["run", "--dry-run", "--no-interactive"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert "simulating git add ." in result.output
    assert "would execute" in result.output
    assert repo.added == 0
    assert repo.commits == []


def test_run_dry_run_without_working_diff(repo, llm, api_key):
    repo.changes = [FileChange("new.txt", "?", "?")]
    result = invoke(["run", "--dry-run"])
    assert result.exit_code == cli.EXIT_NO_CHANGES
    assert "No changes to analyze" in result.output


def test_run_commit_failure(repo, llm, api_key):
    repo.commit = Mock(side_effect=GitError("pre-commit hook failed"))
    result = invoke(["run", "--no-interactive"])
    assert result.exit_code == cli.EXIT_VCS_FAILURE
    assert "pre-commit hook failed" in result.output


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------

def test_list_all():
    result = invoke(["list"])
    assert result.exit_code == cli.EXIT_SUCCESS
    assert "🐛 :bug:" in result.output
    assert "Use --search or --category" in result.output


def test_list_category_and_codes():
    result = invoke(["list", "--category", "revert", "--codes"])
    assert result.exit_code == cli.EXIT_SUCCESS
    assert "(1/" in result.output
    assert ":rewind: :rewind: - Revert changes." in result.output
    assert "Remove filters" in result.output


def test_list_unknown_category():
    result = invoke(["list", "-c", "nonsense"])
    assert result.exit_code == cli.EXIT_INVALID_USAGE
    assert "Available categories" in result.output


def test_list_search_without_results():
    result = invoke(["list", "--search", "zzzz"])
    assert result.exit_code == cli.EXIT_SUCCESS
    assert "No gitmojis found" in result.output


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

def test_config_list_defaults():
    result = invoke(["config"])
    assert result.exit_code == cli.EXIT_SUCCESS
    assert "Provider: openai" in result.output
    assert "Model: gpt-4o-mini" in result.output
    assert "API Key: ❌ Not set" in result.output


def test_config_set_and_get(isolate_user_config):
    result = invoke(["config", "provider", "anthropic"])
    assert result.exit_code == cli.EXIT_SUCCESS
    assert json.loads(isolate_user_config.read_text())["provider"] == "anthropic"

    result = invoke(["config", "provider"])
    assert result.output.strip() == "provider: anthropic"

    invoke(["config", "autoCommit", "true"])
    assert invoke(["config", "autoCommit"]).output.strip() == "autoCommit: true"


def test_config_invalid_provider(isolate_user_config):
    result = invoke(["config", "provider", "ollama"])
    assert result.exit_code == cli.EXIT_CONFIG_ERROR
    assert "Invalid provider" in result.output
    assert not isolate_user_config.exists()


def test_config_get_unset_key():
    result = invoke(["config", "scope"])
    assert result.exit_code == cli.EXIT_CONFIG_ERROR


def test_config_api_key_is_masked(isolate_user_config):
    result = invoke(["config", "apiKey", "sk-secret"])
    assert "sk-secret" not in result.output
    assert "sk-secret" not in invoke(["config", "apiKey"]).output
    assert "API Key: ✅ Set" in invoke(["config", "--list"]).output


def test_config_reset(isolate_user_config):
    isolate_user_config.write_text(json.dumps({"provider": "anthropic", "scope": "ui"}))
    result = invoke(["config", "--reset"], input="y\n")
    assert result.exit_code == cli.EXIT_SUCCESS
    assert json.loads(isolate_user_config.read_text()) == {
        "provider": "openai",
        "model": "gpt-4o-mini",
        "interactive": True,
        "autoCommit": False,
    }


def test_config_interactive(isolate_user_config):
    result = invoke(["config", "--interactive"], input="anthropic\nclaude-3-5-haiku-latest\nn\ny\ncore\n")
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert json.loads(isolate_user_config.read_text()) == {
        "provider": "anthropic",
        "model": "claude-3-5-haiku-latest",
        "interactive": False,
        "autoCommit": True,
        "scope": "core",
    }


def test_corrupt_config_file(isolate_user_config, api_key, repo, llm):
    isolate_user_config.write_text("{not json")
    result = invoke(["generate"])
    assert result.exit_code == cli.EXIT_CONFIG_ERROR
    assert "Invalid JSON" in result.output


def test_version():
    result = invoke(["--version"])
    assert result.exit_code == cli.EXIT_SUCCESS
    assert "gitmoji-msg" in result.output
