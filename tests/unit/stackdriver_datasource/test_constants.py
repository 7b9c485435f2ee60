import pytest

from stackdriver_datasource.constants import (
    STACKDRIVER_UNIT_MAPPINGS,
    get_aggregation_options_by_metric,
    get_alignment_options_by_metric,
    get_alignment_picker_data,
)
from stackdriver_datasource.templating import TemplateSrv, TemplateVariable


def _values(options):
    return [o.value for o in options]


def test_alignment_options_for_cumulative_int():
    values = _values(get_alignment_options_by_metric("INT64", "CUMULATIVE"))
    assert values == ["ALIGN_DELTA", "ALIGN_RATE"]


def test_alignment_options_for_distribution_gauge():
    values = _values(get_alignment_options_by_metric("DISTRIBUTION", "GAUGE"))
    assert "ALIGN_PERCENTILE_99" in values
    assert "ALIGN_NEXT_OLDER" in values
    assert "ALIGN_INTERPOLATE" not in values


@pytest.mark.parametrize("value_type", [None, ""])
def test_alignment_options_need_value_type(value_type):
    assert get_alignment_options_by_metric(value_type, "GAUGE") == []


@pytest.mark.parametrize("metric_kind", [None, ""])
def test_aggregation_options_need_metric_kind(metric_kind):
    assert get_aggregation_options_by_metric("DOUBLE", metric_kind) == []


def test_aggregation_options_for_cumulative_only_none():
    assert _values(get_aggregation_options_by_metric("DOUBLE", "CUMULATIVE")) == [
        "REDUCE_NONE"
    ]


def test_unit_mappings():
    assert STACKDRIVER_UNIT_MAPPINGS["By"] == "bytes"
    assert STACKDRIVER_UNIT_MAPPINGS["By/s"] == "Bps"


class TestAlignmentPickerData:
    @pytest.fixture
    def template_srv(self):
        return TemplateSrv(variables=[TemplateVariable(name="aligner", value="ALIGN_MAX")])

    def test_keeps_applicable_aligner(self, template_srv):
        data = get_alignment_picker_data("DOUBLE", "GAUGE", "ALIGN_MEAN", template_srv)
        assert data["per_series_aligner"] == "ALIGN_MEAN"

    def test_keeps_aligner_variable(self, template_srv):
        data = get_alignment_picker_data("DOUBLE", "GAUGE", "$aligner", template_srv)
        assert data["per_series_aligner"] == "$aligner"

    def test_replaces_inapplicable_aligner_with_first_option(self, template_srv):
        data = get_alignment_picker_data("INT64", "CUMULATIVE", "ALIGN_MEAN", template_srv)
        assert data["per_series_aligner"] == "ALIGN_DELTA"

    def test_no_options_selects_nothing(self, template_srv):
        data = get_alignment_picker_data(None, "GAUGE", "ALIGN_MEAN", template_srv)
        assert data["per_series_aligner"] == ""
        assert data["align_options"][1]["options"] == []

    def test_lists_template_variables(self, template_srv):
        data = get_alignment_picker_data("DOUBLE", "GAUGE", None, template_srv)
        assert data["align_options"][0] == {
            "label": "Template Variables",
            "options": [{"label": "$aligner", "value": "$aligner"}],
        }
