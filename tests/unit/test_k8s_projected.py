"""Tests for projected volume source flatten/expand."""

import pytest
from kubernetes.client import (
    V1ClusterTrustBundleProjection,
    V1ConfigMapProjection,
    V1DownwardAPIProjection,
    V1DownwardAPIVolumeFile,
    V1KeyToPath,
    V1LabelSelector,
    V1LabelSelectorRequirement,
    V1ProjectedVolumeSource,
    V1SecretProjection,
    V1ServiceAccountTokenProjection,
    V1VolumeProjection,
)

from kubeshape.core.config import MappingOptions
from kubeshape.core.errors import DecodeError
from kubeshape.k8s.projected import (
    expand_projected_volume_source,
    expand_volume_projection,
    flatten_projected_volume_source,
    flatten_volume_projection,
)

ALL_VARIANTS = V1ProjectedVolumeSource(
    sources=[
        V1VolumeProjection(secret=V1SecretProjection(name="secret-1")),
        V1VolumeProjection(config_map=V1ConfigMapProjection(name="config-1")),
        V1VolumeProjection(config_map=V1ConfigMapProjection(name="config-2")),
        V1VolumeProjection(
            downward_api=V1DownwardAPIProjection(items=[V1DownwardAPIVolumeFile(path="path-1")])
        ),
        V1VolumeProjection(
            service_account_token=V1ServiceAccountTokenProjection(audience="audience-1", path="token")
        ),
        V1VolumeProjection(
            cluster_trust_bundle=V1ClusterTrustBundleProjection(
                signer_name="example.com/signer",
                path="ca.pem",
                label_selector=V1LabelSelector(
                    match_labels={"trust": "internal"},
                    match_expressions=[
                        V1LabelSelectorRequirement(key="tier", operator="In", values=["a", "b"]),
                    ],
                ),
            )
        ),
    ],
)


class TestFlattenProjectedVolumeSource:
    """Tests for flatten_projected_volume_source()."""

    def test_only_populated_variant_is_rendered(self):
        flattened = flatten_projected_volume_source(ALL_VARIANTS)

        sources = flattened[0]["sources"]
        assert [list(s.keys()) for s in sources] == [
            ["secret"],
            ["config_map"],
            ["config_map"],
            ["downward_api"],
            ["service_account_token"],
            ["cluster_trust_bundle"],
        ]

    def test_variant_fields(self):
        flattened = flatten_projected_volume_source(ALL_VARIANTS)

        sources = flattened[0]["sources"]
        assert sources[0] == {"secret": [{"name": "secret-1"}]}
        assert sources[3] == {"downward_api": [{"items": [{"path": "path-1"}]}]}
        assert sources[4] == {"service_account_token": [{"audience": "audience-1", "path": "token"}]}
        assert sources[5] == {
            "cluster_trust_bundle": [
                {
                    "signer_name": "example.com/signer",
                    "path": "ca.pem",
                    "label_selector": [
                        {
                            "match_labels": {"trust": "internal"},
                            "match_expressions": [{"key": "tier", "operator": "In", "values": ["a", "b"]}],
                        }
                    ],
                }
            ]
        }

    def test_default_mode_and_items(self):
        source = V1ProjectedVolumeSource(
            default_mode=0o440,
            sources=[
                V1VolumeProjection(
                    secret=V1SecretProjection(
                        name="tls",
                        optional=False,
                        items=[V1KeyToPath(key="tls.crt", path="cert.pem", mode=0o400)],
                    )
                ),
            ],
        )

        assert flatten_projected_volume_source(source) == [
            {
                "default_mode": "0440",
                "sources": [
                    {
                        "secret": [
                            {
                                "name": "tls",
                                "optional": False,
                                "items": [{"key": "tls.crt", "path": "cert.pem", "mode": "0400"}],
                            }
                        ]
                    }
                ],
            }
        ]

    def test_expiration_seconds_rendered_as_decimal_string(self):
        projection = V1VolumeProjection(
            service_account_token=V1ServiceAccountTokenProjection(expiration_seconds=3600, path="token")
        )

        assert flatten_volume_projection(projection) == {
            "service_account_token": [{"expiration_seconds": "3600", "path": "token"}]
        }

    def test_zero_value(self):
        assert flatten_projected_volume_source(V1ProjectedVolumeSource()) == [{}]


class TestExpandProjectedVolumeSource:
    """Tests for expand_projected_volume_source()."""

    def test_expand_of_flatten(self):
        """Test that every variant survives typed -> dynamic -> typed."""
        assert expand_projected_volume_source(flatten_projected_volume_source(ALL_VARIANTS)) == ALL_VARIANTS

    def test_flatten_is_stable(self):
        """Test flatten(expand(flatten(p))) == flatten(p), including order."""
        flattened_first = flatten_projected_volume_source(ALL_VARIANTS)
        out = expand_projected_volume_source(flattened_first)

        assert flatten_projected_volume_source(out) == flattened_first

    @pytest.mark.parametrize("value", [[], None, [None]])
    def test_unset_block(self, value):
        assert expand_projected_volume_source(value) == V1ProjectedVolumeSource()

    def test_service_account_token_without_path(self):
        result = expand_volume_projection({"service_account_token": [{"audience": "a"}]})

        assert result.service_account_token == V1ServiceAccountTokenProjection(audience="a", path="")

    def test_several_variants_is_decode_error(self):
        element = {"secret": [{"name": "s"}], "config_map": [{"name": "c"}]}

        with pytest.raises(DecodeError) as exc_info:
            expand_projected_volume_source([{"sources": [{"secret": [{"name": "ok"}]}, element]}])

        assert exc_info.value.entity == "projected.sources[1]"
        assert "secret" in str(exc_info.value)
        assert "config_map" in str(exc_info.value)

    def test_no_variant_is_decode_error(self):
        with pytest.raises(DecodeError):
            expand_projected_volume_source([{"sources": [{}]}])

    def test_empty_variant_lists_do_not_count(self):
        """Test that unset sibling blocks rendered as [] are ignored."""
        element = {"secret": [{"name": "s"}], "config_map": [], "downward_api": []}

        result = expand_volume_projection(element)

        assert result == V1VolumeProjection(secret=V1SecretProjection(name="s"))

    def test_empty_variant_block_counts(self):
        result = expand_volume_projection({"downward_api": [{}]})

        assert result == V1VolumeProjection(downward_api=V1DownwardAPIProjection())

    def test_lenient_options_populate_every_variant(self):
        options = MappingOptions(strict_projections=False)
        element = {"secret": [{"name": "s"}], "config_map": [{"name": "c"}]}

        result = expand_volume_projection(element, options)

        assert result == V1VolumeProjection(
            secret=V1SecretProjection(name="s"),
            config_map=V1ConfigMapProjection(name="c"),
        )

    def test_lenient_options_accept_empty_element(self):
        options = MappingOptions(strict_projections=False)

        result = expand_projected_volume_source([{"sources": [{}]}], options)

        assert result == V1ProjectedVolumeSource(sources=[V1VolumeProjection()])

    def test_invalid_expiration_seconds(self):
        with pytest.raises(DecodeError) as exc_info:
            expand_projected_volume_source([
                {"sources": [{"service_account_token": [{"path": "t", "expiration_seconds": "1h"}]}]}
            ])

        assert exc_info.value.location == (
            "projected.sources[0].service_account_token.expiration_seconds"
        )

    def test_invalid_default_mode(self):
        with pytest.raises(DecodeError) as exc_info:
            expand_projected_volume_source([{"default_mode": "0999"}])

        assert exc_info.value.location == "projected.default_mode"

    def test_label_selector_values_must_be_a_list(self):
        """Test that a scalar where a list of values belongs is rejected, not split."""
        element = {
            "cluster_trust_bundle": [
                {
                    "path": "ca.pem",
                    "label_selector": [
                        {"match_expressions": [{"key": "tier", "operator": "In", "values": "abc"}]}
                    ],
                }
            ]
        }

        with pytest.raises(DecodeError) as exc_info:
            expand_volume_projection(element)

        assert exc_info.value.location == (
            "cluster_trust_bundle.label_selector.match_expressions[0].values"
        )
