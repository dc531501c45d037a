"""
Unit tests for CLI module (tarkov_api/cli.py).

Tests cover:
- Command parsing
- login command (env credentials, captcha prompt, failures)
- keepalive command
- hwid command
- Environment variable handling

HTTP is mocked with respx; the commands run their own event loop, so these
tests are plain synchronous functions.
"""

import argparse
import json
from unittest.mock import patch

import pytest
import respx

from tarkov_api import cli
from tarkov_api.api.errors import ApiError, ErrorKind
from tarkov_api.config import Config
from tarkov_api.hwid import HWID_LENGTH
from tests.constants import TEST_EMAIL, TEST_HWID, TEST_PASSWORD, TEST_SESSION
from tests.helpers import envelope_response, login_data, session_data

DEFAULTS = Config()


def login_args(**overrides) -> argparse.Namespace:
    values = {
        "email": TEST_EMAIL,
        "password": TEST_PASSWORD,
        "hwid": TEST_HWID,
        "keep_alive": False,
        "interval": 20.0,
        "timeout": None,
        "verbose": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


def keepalive_args(**overrides) -> argparse.Namespace:
    values = {
        "session": TEST_SESSION,
        "hwid": TEST_HWID,
        "interval": 20.0,
        "beats": 1,
        "timeout": None,
        "verbose": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture(autouse=True)
def clean_env():
    """Keep TARKOV_* variables from the developer's shell out of the tests."""
    with patch.dict("os.environ", {}, clear=True):
        yield


# ============================================================================
# ENVIRONMENT VARIABLE TESTS
# ============================================================================


@pytest.mark.unit
def test_get_credentials_from_env_both_set():
    """Test getting credentials when both env vars are set."""
    with patch.dict("os.environ", {"TARKOV_EMAIL": TEST_EMAIL, "TARKOV_PASSWORD": "secret123"}):
        result = cli.get_credentials_from_env()
        assert result == (TEST_EMAIL, "secret123")


@pytest.mark.unit
def test_get_credentials_from_env_password_missing():
    """Test getting credentials when TARKOV_PASSWORD is missing."""
    with patch.dict("os.environ", {"TARKOV_EMAIL": TEST_EMAIL}):
        assert cli.get_credentials_from_env() is None


@pytest.mark.unit
def test_get_credentials_from_env_neither_set():
    """Test getting credentials when neither env var is set."""
    assert cli.get_credentials_from_env() is None


@pytest.mark.unit
def test_build_config_applies_cli_overrides():
    """Test CLI flags win over the environment."""
    with patch.dict("os.environ", {"TARKOV_REQUEST_TIMEOUT": "9", "TARKOV_LOG_LEVEL": "ERROR"}):
        config = cli.build_config(argparse.Namespace(timeout=3.0, verbose=True))

    assert config.timeout == 3.0
    assert config.log_level == "DEBUG"


@pytest.mark.unit
def test_build_config_uses_env_without_flags():
    with patch.dict("os.environ", {"TARKOV_REQUEST_TIMEOUT": "9"}):
        config = cli.build_config(argparse.Namespace(timeout=None, verbose=False))

    assert config.timeout == 9.0
    assert config.log_level == "WARNING"


# ============================================================================
# PROMPT TESTS
# ============================================================================


@pytest.mark.unit
def test_prompt_for_credentials():
    """Test interactive credential prompting."""
    with (
        patch("builtins.input", return_value=f"  {TEST_EMAIL} "),
        patch("getpass.getpass", return_value=TEST_PASSWORD),
    ):
        assert cli.prompt_for_credentials() == (TEST_EMAIL, TEST_PASSWORD)


@pytest.mark.unit
def test_prompt_for_credentials_keeps_given_email():
    with (
        patch("builtins.input") as mock_input,
        patch("getpass.getpass", return_value=TEST_PASSWORD),
    ):
        assert cli.prompt_for_credentials(TEST_EMAIL) == (TEST_EMAIL, TEST_PASSWORD)
        mock_input.assert_not_called()


@pytest.mark.unit
def test_prompt_for_credentials_cancelled():
    """Test Ctrl+C during the prompt exits with status 1."""
    with patch("builtins.input", side_effect=KeyboardInterrupt):
        with pytest.raises(SystemExit) as exc_info:
            cli.prompt_for_credentials()

    assert exc_info.value.code == 1


# ============================================================================
# INTERACTIVE LOGIN TESTS
# ============================================================================


@pytest.mark.unit
class TestLoginInteractively:
    """Tests for the captcha / 2FA prompting loop."""

    @respx.mock
    async def test_prompts_for_captcha_once(self):
        login_route = respx.post(DEFAULTS.login_url)
        login_route.side_effect = [
            envelope_response(214),
            envelope_response(0, login_data()),
        ]
        respx.post(DEFAULTS.exchange_url).mock(return_value=envelope_response(0, session_data()))
        prompts = []

        def prompt(text: str) -> str:
            prompts.append(text)
            return "captcha-token"

        client = await cli.login_interactively(
            TEST_EMAIL, TEST_PASSWORD, TEST_HWID, DEFAULTS, prompt=prompt
        )
        async with client:
            assert client.session.session == TEST_SESSION

        assert len(prompts) == 1
        assert b'"captcha":"captcha-token"' in login_route.calls.last.request.content

    @respx.mock
    async def test_prompts_for_two_factor_code(self):
        respx.post(DEFAULTS.login_url).side_effect = [
            envelope_response(209),
            envelope_response(0, login_data()),
        ]
        activation = respx.post(DEFAULTS.activate_hardware_url).mock(
            return_value=envelope_response(0)
        )
        respx.post(DEFAULTS.exchange_url).mock(return_value=envelope_response(0, session_data()))

        client = await cli.login_interactively(
            TEST_EMAIL, TEST_PASSWORD, TEST_HWID, DEFAULTS, prompt=lambda _: " 123456 "
        )
        await client.aclose()

        assert b'"activateCode":"123456"' in activation.calls.last.request.content

    @respx.mock
    async def test_captcha_after_two_factor(self):
        """Test a captcha asked for after 2FA is sent without activating again."""
        login_route = respx.post(DEFAULTS.login_url)
        login_route.side_effect = [
            envelope_response(209),
            envelope_response(214),
            envelope_response(0, login_data()),
        ]
        activation = respx.post(DEFAULTS.activate_hardware_url).mock(
            return_value=envelope_response(0)
        )
        respx.post(DEFAULTS.exchange_url).mock(return_value=envelope_response(0, session_data()))
        answers = iter(["123456", "CAPTCHA-TOKEN"])

        client = await cli.login_interactively(
            TEST_EMAIL, TEST_PASSWORD, TEST_HWID, DEFAULTS, prompt=lambda _: next(answers)
        )
        await client.aclose()

        assert activation.call_count == 1
        assert login_route.call_count == 3
        assert json.loads(login_route.calls.last.request.content)["captcha"] == "CAPTCHA-TOKEN"

    @respx.mock
    async def test_two_factor_after_captcha(self):
        """Test a captcha solved before 2FA is still sent with the credentials."""
        login_route = respx.post(DEFAULTS.login_url)
        login_route.side_effect = [
            envelope_response(214),
            envelope_response(209),
            envelope_response(0, login_data()),
        ]
        activation = respx.post(DEFAULTS.activate_hardware_url).mock(
            return_value=envelope_response(0)
        )
        respx.post(DEFAULTS.exchange_url).mock(return_value=envelope_response(0, session_data()))
        answers = iter(["CAPTCHA-TOKEN", "123456"])

        client = await cli.login_interactively(
            TEST_EMAIL, TEST_PASSWORD, TEST_HWID, DEFAULTS, prompt=lambda _: next(answers)
        )
        await client.aclose()

        assert activation.call_count == 1
        assert json.loads(login_route.calls.last.request.content)["captcha"] == "CAPTCHA-TOKEN"

    @respx.mock
    async def test_repeated_captcha_gives_up(self):
        """Test a second captcha request is not prompted for again."""
        respx.post(DEFAULTS.login_url).mock(return_value=envelope_response(214))

        with pytest.raises(ApiError) as exc_info:
            await cli.login_interactively(
                TEST_EMAIL, TEST_PASSWORD, TEST_HWID, DEFAULTS, prompt=lambda _: "bad"
            )

        assert exc_info.value.kind is ErrorKind.CAPTCHA_REQUIRED

    @respx.mock
    async def test_other_errors_not_prompted(self):
        respx.post(DEFAULTS.login_url).mock(return_value=envelope_response(206))

        def prompt(text: str) -> str:
            raise AssertionError("should not prompt")

        with pytest.raises(ApiError) as exc_info:
            await cli.login_interactively(
                TEST_EMAIL, TEST_PASSWORD, TEST_HWID, DEFAULTS, prompt=prompt
            )

        assert exc_info.value.kind is ErrorKind.BAD_CREDENTIALS


# ============================================================================
# LOGIN COMMAND TESTS
# ============================================================================


@pytest.mark.unit
@respx.mock
def test_cmd_login_success(capsys):
    """Test login prints the session id."""
    respx.post(DEFAULTS.login_url).mock(return_value=envelope_response(0, login_data()))
    respx.post(DEFAULTS.exchange_url).mock(return_value=envelope_response(0, session_data()))

    result = cli.cmd_login(login_args())

    assert result == 0
    assert capsys.readouterr().out.strip() == TEST_SESSION


@pytest.mark.unit
@respx.mock
def test_cmd_login_uses_env_credentials():
    route = respx.post(DEFAULTS.login_url).mock(return_value=envelope_response(206))

    with patch.dict("os.environ", {"TARKOV_EMAIL": "env@b.com", "TARKOV_PASSWORD": "pw"}):
        result = cli.cmd_login(login_args(email=None, password=None))

    assert result == 1
    assert b'"email":"env@b.com"' in route.calls.last.request.content


@pytest.mark.unit
@respx.mock
def test_cmd_login_generates_hwid(capsys):
    """Test a missing hwid is generated and shown so it can be reused."""
    route = respx.post(DEFAULTS.login_url).mock(return_value=envelope_response(206))

    cli.cmd_login(login_args(hwid=None))

    assert "Generated a new hardware ID" in capsys.readouterr().err
    assert len(route.calls.last.request.content) > HWID_LENGTH


@pytest.mark.unit
@respx.mock
def test_cmd_login_rejected(capsys):
    """Test a rejected login returns 1 with the error on stderr."""
    respx.post(DEFAULTS.login_url).mock(return_value=envelope_response(206))

    result = cli.cmd_login(login_args())

    assert result == 1
    assert "Login failed: bad login, invalid email or password" in capsys.readouterr().err


@pytest.mark.unit
def test_cmd_login_bad_interval(capsys):
    """Test an interval that would let the session lapse is refused up front."""
    result = cli.cmd_login(login_args(keep_alive=True, interval=45.0))

    assert result == 2
    assert "--interval" in capsys.readouterr().err


# ============================================================================
# KEEPALIVE COMMAND TESTS
# ============================================================================


@pytest.mark.unit
@respx.mock
def test_cmd_keepalive_success():
    route = respx.post(DEFAULTS.keep_alive_url).mock(return_value=envelope_response(0))

    result = cli.cmd_keepalive(keepalive_args())

    assert result == 0
    assert route.calls.last.request.headers["Cookie"] == f"PHPSESSID={TEST_SESSION}"


@pytest.mark.unit
def test_cmd_keepalive_session_from_env():
    with (
        patch.dict("os.environ", {"TARKOV_SESSION": "from-env"}),
        respx.mock,
    ):
        route = respx.post(DEFAULTS.keep_alive_url).mock(return_value=envelope_response(0))
        result = cli.cmd_keepalive(keepalive_args(session=None))

    assert result == 0
    assert route.calls.last.request.headers["Cookie"] == "PHPSESSID=from-env"


@pytest.mark.unit
def test_cmd_keepalive_without_session(capsys):
    """Test keepalive needs a session id."""
    result = cli.cmd_keepalive(keepalive_args(session=None))

    assert result == 2
    assert "no session given" in capsys.readouterr().err


@pytest.mark.unit
@respx.mock
def test_cmd_keepalive_expired_session(capsys):
    """Test a lapsed session returns 1."""
    respx.post(DEFAULTS.keep_alive_url).mock(return_value=envelope_response(201))

    result = cli.cmd_keepalive(keepalive_args())

    assert result == 1
    assert "Keep-alive failed" in capsys.readouterr().err


# ============================================================================
# HWID COMMAND / PARSER TESTS
# ============================================================================


@pytest.mark.unit
def test_cmd_hwid(capsys):
    result = cli.cmd_hwid(argparse.Namespace())

    assert result == 0
    assert len(capsys.readouterr().out.strip()) == HWID_LENGTH


@pytest.mark.unit
def test_main_without_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage: tarkov-api" in capsys.readouterr().out


@pytest.mark.unit
def test_main_dispatches_hwid(capsys):
    assert cli.main(["hwid"]) == 0
    assert capsys.readouterr().out.startswith("#1-")


@pytest.mark.unit
def test_parser_login_options():
    """Test global and login options parse into the namespace."""
    args = cli.build_parser().parse_args(
        ["-t", "5", "-v", "login", "-e", TEST_EMAIL, "--keep-alive", "--interval", "10"]
    )

    assert args.command == "login"
    assert args.timeout == 5.0
    assert args.verbose is True
    assert args.email == TEST_EMAIL
    assert args.password is None
    assert args.keep_alive is True
    assert args.interval == 10.0
    assert args.func is cli.cmd_login


@pytest.mark.unit
def test_parser_keepalive_defaults():
    args = cli.build_parser().parse_args(["keepalive", "-s", TEST_SESSION])

    assert args.session == TEST_SESSION
    assert args.interval == 20.0
    assert args.beats is None
