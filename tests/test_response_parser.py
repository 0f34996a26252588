"""
Tests for parse_score_report — model text in, validated ScoreReport out.
"""

import json

import pytest

from conftest import VALID_REPORT
from pratyaksh.ai.errors import ResponseValidationError
from pratyaksh.ai.response_parser import parse_score_report
from pratyaksh.models.analysis import ConfidenceLevel


def _with(**changes) -> dict:
    report = json.loads(json.dumps(VALID_REPORT))
    report.update(changes)
    return report


class TestAccepted:
    def test_plain_json(self):
        report = parse_score_report(json.dumps(VALID_REPORT))
        assert report.authenticity_score == 91
        assert report.confidence_level is ConfidenceLevel.HIGH
        assert report.indicators[1].status.value == "Suspicious"
        assert report.top_factors[0].confidence_score == 88
        assert report.summary == "Image is very likely authentic."

    def test_code_fenced_json(self):
        text = "```json\n" + json.dumps(VALID_REPORT) + "\n```"
        assert parse_score_report(text).authenticity_score == 91

    def test_json_surrounded_by_prose(self):
        text = "Here is my analysis:\n" + json.dumps(VALID_REPORT) + "\nLet me know if you need more."
        assert parse_score_report(text).authenticity_score == 91

    def test_missing_top_factors_defaults_to_empty(self):
        report = _with()
        del report["top5Factors"]
        assert parse_score_report(json.dumps(report)).top_factors == []

    def test_null_top_factors_defaults_to_empty(self):
        assert parse_score_report(json.dumps(_with(top5Factors=None))).top_factors == []

    def test_more_than_five_factors_truncated(self):
        factor = VALID_REPORT["top5Factors"][0]
        report = _with(top5Factors=[dict(factor, title=f"F{i}") for i in range(7)])
        parsed = parse_score_report(json.dumps(report))
        assert [f.title for f in parsed.top_factors] == ["F0", "F1", "F2", "F3", "F4"]

    def test_fractional_score_rounded(self):
        assert parse_score_report(json.dumps(_with(authenticityScore=87.6))).authenticity_score == 88

    def test_zero_score_is_valid(self):
        assert parse_score_report(json.dumps(_with(authenticityScore=0))).authenticity_score == 0


class TestRejected:
    @pytest.mark.parametrize("text", ["", "   ", "\n"])
    def test_empty(self, text):
        with pytest.raises(ResponseValidationError, match="Empty response"):
            parse_score_report(text)

    def test_non_json_text(self):
        with pytest.raises(ResponseValidationError):
            parse_score_report("The image looks authentic to me.")

    def test_broken_json(self):
        with pytest.raises(ResponseValidationError):
            parse_score_report('{"authenticityScore": 80, "confidenceLevel": ')

    def test_json_array(self):
        with pytest.raises(ResponseValidationError):
            parse_score_report(json.dumps([VALID_REPORT]))

    def test_missing_required_field(self):
        report = _with()
        del report["finalAssessment"]
        with pytest.raises(ResponseValidationError, match="Invalid response structure"):
            parse_score_report(json.dumps(report))

    @pytest.mark.parametrize("score", [-1, 101, "high"])
    def test_score_out_of_range(self, score):
        with pytest.raises(ResponseValidationError):
            parse_score_report(json.dumps(_with(authenticityScore=score)))

    @pytest.mark.parametrize("score", [True, False, "85"])
    def test_score_must_be_a_number(self, score):
        with pytest.raises(ResponseValidationError):
            parse_score_report(json.dumps(_with(authenticityScore=score)))

    @pytest.mark.parametrize("confidence", [True, "88"])
    def test_factor_confidence_must_be_a_number(self, confidence):
        factor = dict(VALID_REPORT["top5Factors"][0], confidence=confidence)
        with pytest.raises(ResponseValidationError):
            parse_score_report(json.dumps(_with(top5Factors=[factor])))

    def test_unknown_confidence_level(self):
        with pytest.raises(ResponseValidationError):
            parse_score_report(json.dumps(_with(confidenceLevel="Very High")))

    def test_unknown_indicator_status(self):
        bad = [{"name": "X", "status": "Fake", "reason": "r"}]
        with pytest.raises(ResponseValidationError):
            parse_score_report(json.dumps(_with(keyIndicators=bad)))

    def test_source_named_in_error(self):
        with pytest.raises(ResponseValidationError, match="key7"):
            parse_score_report("", source="key7")
