"""Tests for CachixService."""

from pathlib import Path

from kernel_ci.services.cachix import CachixService


class TestCachixService:
    def test_setup_without_token(self, command_runner, config):
        service = CachixService(runner=command_runner, config=config)

        result = service.setup("huggingface", search_path=["/nix/bin"])

        assert result.success, result.error
        assert result.data.cache_name == "huggingface"
        assert result.data.authenticated is False
        assert command_runner.commands() == [
            ["nix-env", "-iA", "cachix", "-f", "https://cachix.org/api/v1/install"],
            ["cachix", "use", "huggingface"],
        ]

    def test_setup_with_token(self, command_runner, config):
        service = CachixService(runner=command_runner, config=config)

        result = service.setup("my-cache", auth_token="tok", search_path=["/nix/bin"])

        assert result.data.authenticated is True
        authtoken = command_runner.calls_to("cachix", "authtoken")[0]
        assert authtoken.args == ["cachix", "authtoken", "tok"]
        assert authtoken.secrets == ["tok"]
        assert command_runner.commands()[-1] == ["cachix", "use", "my-cache"]

    def test_cachix_runs_with_user_profile_on_path(self, command_runner, config):
        CachixService(runner=command_runner, config=config).setup("c", search_path=["/nix/bin"])

        use = command_runner.calls_to("cachix", "use")[0]
        assert use.search_path == ["/nix/bin", str(Path("~/.nix-profile/bin").expanduser())]
        assert command_runner.calls_to("nix-env")[0].search_path == ["/nix/bin"]

    def test_empty_name_is_an_error(self, command_runner, config):
        result = CachixService(runner=command_runner, config=config).setup("")

        assert not result.success
        assert result.error_type == "CacheError"
        assert command_runner.calls == []

    def test_failure(self, command_runner, config):
        command_runner.fail(("cachix", "use"))

        result = CachixService(runner=command_runner, config=config).setup("c")

        assert not result.success
        assert result.error_type == "CacheError"
        assert result.error.startswith("Cachix setup failed")
