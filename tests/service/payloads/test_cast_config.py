import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from src.exceptions import PreconditionError
from src.service.payloads.cast_config import CastConfig


class TestCastConfig:
    def test_defaults(self):
        config = CastConfig()

        assert config.num_groups == 99
        assert config.num_tracers == 11
        assert config.range == 1000000
        assert config.cast_size == 10000
        assert config.num_cast == 3
        assert config.clamp is True
        assert config.group_width == 1
        assert config.total_samples == 30000

    def test_camel_case_aliases(self):
        config = CastConfig(numGroups=4, numTracers=5, range=100, castSize=10, numCast=2)

        assert config.num_groups == 4
        assert config.num_tracers == 5
        assert config.cast_size == 10
        assert config.num_cast == 2
        assert config.group_width == 20

    def test_to_tags_uses_aliases(self):
        tags = CastConfig(num_groups=1).to_tags()
        assert tags["numGroups"] == "1"
        assert tags["castSize"] == "10000"
        assert tags["range"] == "1000000"

    def test_frozen(self):
        config = CastConfig()
        with pytest.raises(Exception):
            config.num_groups = 4

    @given(num_groups=st.integers(min_value=1, max_value=99))
    @settings(max_examples=99, deadline=None)
    def test_group_counts(self, num_groups):
        """Only group counts with 100 % (G + 1) == 0 are accepted."""
        if 100 % (num_groups + 1) == 0:
            assert CastConfig.build(num_groups=num_groups).group_width * (num_groups + 1) == 100
        else:
            with pytest.raises(PreconditionError):
                CastConfig.build(num_groups=num_groups)

    def test_group_count_fifty_rejected(self):
        with pytest.raises(PreconditionError, match="100 must be divisible by num_groups \\+ 1") as excinfo:
            CastConfig.build(num_groups=50)
        assert excinfo.value.parameter == "num_groups"
        assert excinfo.value.value == 50

    @pytest.mark.parametrize(
        "params, parameter",
        [
            ({"num_groups": 0}, "num_groups"),
            ({"num_groups": 100}, "num_groups"),
            ({"num_tracers": 1}, "num_tracers"),
            ({"range": 1}, "range"),
            ({"cast_size": 0}, "cast_size"),
            ({"num_cast": 0}, "num_cast"),
            ({"numCast": -3}, "num_cast"),
        ],
    )
    def test_out_of_domain(self, params, parameter):
        with pytest.raises(PreconditionError, match="Invalid cast parameters") as excinfo:
            CastConfig.build(**params)
        assert excinfo.value.parameter == parameter

    def test_unknown_parameter_rejected(self):
        with pytest.raises(PreconditionError, match="Extra inputs are not permitted") as excinfo:
            CastConfig.build(num_group=4)
        assert excinfo.value.parameter == "num_group"

    def test_build_keeps_validation_error_as_cause(self):
        with pytest.raises(PreconditionError) as excinfo:
            CastConfig.build(num_tracers=0)
        assert excinfo.value.__cause__ is not None
