import pytest

from storefront_client.auth import (
    CART_BOOTSTRAP,
    AUTH_START,
    VALIDATE,
    AuthStartFailed,
    LoginOutcome,
    MissingAuthToken,
    MissingFinalToken,
    StepResult,
    ValidationFailed,
    WrongCredentials,
    read_auth_start,
    read_validation,
)


def test_auth_start_success_yields_vss_token():
    step = read_auth_start(200, {"authenticationToken": "vss"})

    assert step.ok
    assert step.value == "vss"
    assert step.step == AUTH_START


@pytest.mark.parametrize("body", [{}, None, [], {"authenticationToken": ""}, {"authenticationToken": 12}])
def test_auth_start_success_without_token_is_missing_auth_token(body):
    step = read_auth_start(200, body)

    assert isinstance(step.error, MissingAuthToken)


def test_auth_start_http_failure_uses_given_message():
    step = read_auth_start(502, None, "Bad gateway")

    assert isinstance(step.error, AuthStartFailed)
    assert step.error.status_code == 502
    assert step.error.message == "Bad gateway"


def test_auth_start_http_failure_falls_back_to_body_message():
    step = read_auth_start(400, {"message": "scope required"})

    assert step.error.message == "scope required"


def test_validation_wrong_credentials_wins_over_token():
    body = {"authStatus": "WrongCredentials", "authCookie": {"Value": "tok"}}

    assert isinstance(read_validation(200, body).error, WrongCredentials)


def test_validation_wrong_credentials_match_is_exact():
    step = read_validation(200, {"authStatus": "wrongcredentials"})

    assert isinstance(step.error, MissingFinalToken)
    assert step.error.auth_status == "wrongcredentials"


def test_validation_success():
    step = read_validation(200, {"authStatus": "Success", "authCookie": {"Value": "final"}})

    assert step.ok
    assert step.value == "final"
    assert step.step == VALIDATE


@pytest.mark.parametrize("body", [{}, None, {"authCookie": None}, {"authCookie": {"Value": ""}}])
def test_validation_without_token_is_missing_final_token(body):
    assert isinstance(read_validation(200, body).error, MissingFinalToken)


def test_validation_http_failure_is_not_wrong_credentials():
    step = read_validation(500, {"authStatus": "WrongCredentials"}, "server error")

    assert isinstance(step.error, ValidationFailed)
    assert step.error.status_code == 500


def test_outcome_ignores_optional_step_failures():
    outcome = LoginOutcome(
        steps=(
            StepResult(AUTH_START, value="vss"),
            StepResult(VALIDATE, value="tok"),
            StepResult(CART_BOOTSTRAP, error=RuntimeError("no cart"), required=False),
        ),
        token="tok",
    )

    assert outcome.succeeded
    assert outcome.failed_step is None
    assert outcome.raise_for_failure() == "tok"


def test_outcome_raises_first_required_failure():
    outcome = LoginOutcome(steps=(StepResult(AUTH_START, value="vss"), StepResult(VALIDATE, error=WrongCredentials())))

    assert not outcome.succeeded
    assert outcome.failed_step.step == VALIDATE
    with pytest.raises(WrongCredentials):
        outcome.raise_for_failure()
