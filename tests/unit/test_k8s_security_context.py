"""Tests for Windows security-context options flatten/expand."""

import pytest
from kubernetes.client import V1WindowsSecurityContextOptions

from kubeshape.core.errors import DecodeError
from kubeshape.k8s.security_context import expand_windows_options, flatten_windows_options

CREDENTIAL_SPEC_1 = (
    '{"CmsPlugins":["ActiveDirectory"],"DomainJoinConfig":{"Sid":"S-1-5-21-1234567890-1234567890-1234567890",'
    '"MachineAccountName":"webapp01","Guid":"12345678-1234-1234-1234-123456789012","DnsTreeName":"contoso.com",'
    '"DnsName":"contoso.com","NetBiosName":"CONTOSO"},"ActiveDirectoryConfig":{"GroupManagedServiceAccounts":'
    '[{"Name":"webapp01","Scope":"contoso.com"}]}}'
)
CREDENTIAL_SPEC_2 = (
    '{"CmsPlugins":["ActiveDirectory"],"DomainJoinConfig":{"Sid":"S-1-5-21-9876543210-9876543210-9876543210",'
    '"MachineAccountName":"webapi01","Guid":"87654321-4321-4321-4321-210987654321","DnsTreeName":"corp.local",'
    '"DnsName":"corp.local","NetBiosName":"CORP"},"ActiveDirectoryConfig":{"GroupManagedServiceAccounts":'
    '[{"Name":"webapi01","Scope":"corp.local"}]}}'
)


class TestExpandWindowsOptions:
    """Tests for expand_windows_options()."""

    def test_all_options(self):
        result = expand_windows_options([
            {
                "gmsa_credential_spec": CREDENTIAL_SPEC_1,
                "host_process": True,
                "gmsa_credential_spec_name": "credspecname1",
                "run_as_username": "DOMAIN\\serviceaccount",
            }
        ])

        assert result == V1WindowsSecurityContextOptions(
            gmsa_credential_spec=CREDENTIAL_SPEC_1,
            host_process=True,
            gmsa_credential_spec_name="credspecname1",
            run_as_user_name="DOMAIN\\serviceaccount",
        )

    def test_host_process_false_is_set(self):
        """Test that an explicit False is kept, not treated as absent."""
        result = expand_windows_options([
            {"gmsa_credential_spec": CREDENTIAL_SPEC_2, "host_process": False}
        ])

        assert result == V1WindowsSecurityContextOptions(
            gmsa_credential_spec=CREDENTIAL_SPEC_2,
            host_process=False,
        )
        assert result.host_process is False

    def test_name_and_username_only(self):
        result = expand_windows_options([
            {"gmsa_credential_spec_name": "credspecname2", "run_as_username": "NT AUTHORITY\\SYSTEM"}
        ])

        assert result == V1WindowsSecurityContextOptions(
            gmsa_credential_spec_name="credspecname2",
            run_as_user_name="NT AUTHORITY\\SYSTEM",
        )

    @pytest.mark.parametrize(
        "value",
        [
            [{"gmsa_credential_spec": "", "gmsa_credential_spec_name": "", "run_as_username": ""}],
            [],
            None,
            [None],
        ],
    )
    def test_empty_input_is_fully_unset(self, value):
        """Test that empty strings mean absent, not set-to-empty."""
        result = expand_windows_options(value)

        assert result == V1WindowsSecurityContextOptions()
        assert result.gmsa_credential_spec is None
        assert result.run_as_user_name is None

    def test_non_bool_host_process(self):
        with pytest.raises(DecodeError) as exc_info:
            expand_windows_options([{"host_process": "true"}])

        assert exc_info.value.location == "windows_options.host_process"


class TestFlattenWindowsOptions:
    """Tests for flatten_windows_options()."""

    def test_all_options(self):
        options = V1WindowsSecurityContextOptions(
            gmsa_credential_spec=CREDENTIAL_SPEC_1,
            host_process=True,
            gmsa_credential_spec_name="credspecname1",
            run_as_user_name="DOMAIN\\serviceaccount",
        )

        assert flatten_windows_options(options) == [
            {
                "gmsa_credential_spec": CREDENTIAL_SPEC_1,
                "host_process": True,
                "gmsa_credential_spec_name": "credspecname1",
                "run_as_username": "DOMAIN\\serviceaccount",
            }
        ]

    def test_partial_options(self):
        options = V1WindowsSecurityContextOptions(gmsa_credential_spec=CREDENTIAL_SPEC_2, host_process=False)

        assert flatten_windows_options(options) == [
            {"gmsa_credential_spec": CREDENTIAL_SPEC_2, "host_process": False}
        ]

    def test_zero_value_is_singleton_with_empty_mapping(self):
        assert flatten_windows_options(V1WindowsSecurityContextOptions()) == [{}]
        assert flatten_windows_options(None) == [{}]

    def test_round_trip(self):
        options = V1WindowsSecurityContextOptions(
            gmsa_credential_spec_name="credspecname2",
            host_process=False,
        )

        assert expand_windows_options(flatten_windows_options(options)) == options
