"""
Runtime variables, feature flags and the environment profile.

Variables come from E2E_<name> OS variables, e2e.env.json and the active
profile (see e2e_training.runtime_env). Run against another profile with
e2e-run --env staging.
"""
import pytest

from e2e_training import commands
from e2e_training.env_config import ENVIRONMENTS, settings
from e2e_training.fixtures import load_fixture
from e2e_training.runtime_env import (
    MissingEnvironmentError,
    check_feature_flag,
    feature_flags,
    get_env_variable,
    require_env,
)

pytestmark = pytest.mark.regression


@pytest.fixture(scope="module")
def env_data():
    return load_fixture("environment_data")


class TestRuntimeVariables:

    def test_reads_credentials_from_env_file(self):
        assert get_env_variable("username") == "qa_user"
        assert get_env_variable("password") is not None

    def test_reads_api_base_url(self):
        assert get_env_variable("apiBaseUrl").startswith(("http://", "https://"))

    def test_reads_environment_name(self):
        assert get_env_variable("environment") == settings.environment

    def test_default_for_missing_variable(self):
        assert get_env_variable("nonExistentVar", "default-value") == "default-value"

    def test_required_variables_are_set(self, env_data):
        values = require_env("username", "password", *env_data["requiredVariables"])
        assert all(values.values())

    def test_missing_required_variable_raises(self):
        with pytest.raises(MissingEnvironmentError) as excinfo:
            require_env("username", "definitelyNotConfigured")
        assert excinfo.value.names == ["definitelyNotConfigured"]


class TestFeatureFlags:

    def test_flags_loaded(self):
        flags = feature_flags()
        assert "darkMode" in flags
        assert "betaFeatures" in flags

    def test_flag_is_boolean(self):
        assert isinstance(check_feature_flag("darkMode"), bool)
        assert check_feature_flag("unknownFlag") is False

    def test_runs_only_when_flag_enabled(self):
        if not check_feature_flag("betaFeatures"):
            pytest.skip("betaFeatures flag disabled")
        assert check_feature_flag("betaFeatures") is True


@pytest.mark.api
class TestApiWithEnvironment:

    def test_request_against_environment_base_url(self, api_client, env_data):
        response = api_client.request("GET", settings.api_url(env_data["endpoints"]["users"]), fail_on_status_code=False)
        assert response.status in (200, 201)

    def test_create_with_environment_configuration(self, api_client, env_data):
        response = api_client.api_create(env_data["endpoints"]["posts"], env_data["newPost"])
        assert response.status == 201
        assert response.body["title"] == env_data["newPost"]["title"]

    def test_request_with_environment_timeout(self, api_client, env_data):
        response = api_client.request("GET", "/posts/1", timeout=env_data["timeouts"]["api"] / 1000)
        assert response.status == 200


class TestProfile:

    def test_environment_info_is_logged(self):
        info = commands.log_environment_info()
        assert info["baseUrl"]
        assert info["environment"] == settings.environment

    def test_profile_values(self):
        profile = settings.profile
        assert profile.name in ENVIRONMENTS
        assert profile.timeout > 0
        assert profile.retries >= 0

    def test_viewport_configuration(self):
        assert (settings.viewport_width, settings.viewport_height) == (1280, 800)

    def test_behaviour_depends_on_environment(self):
        if settings.environment == "production":
            assert not settings.debug_mode
            assert settings.retries == 2
        elif settings.environment == "development":
            assert settings.mock_enabled
        else:
            assert not settings.mock_enabled
