from typing import Optional

import pytest

from traffic_analytics.parsers.base import LogRecord
from traffic_analytics.processors.pipeline import (
    FilterStep,
    HostFilter,
    Pipeline,
    ProcessingStep,
    TimeRangeFilter,
)


class TestProcessingStep:
    """Test base processing step functionality"""

    def test_abstract_processing_step(self):
        """Test that ProcessingStep is abstract"""

        class CustomStep(ProcessingStep):
            pass

        with pytest.raises(TypeError):
            CustomStep("test")


class TestFilterSteps:
    """Test filter step functionality"""

    def test_filter_inclusion(self, make_record):
        record = make_record()
        assert FilterStep("keep", lambda r: True).process(record) is record

    def test_filter_exclusion(self, make_record):
        assert FilterStep("drop", lambda r: False).process(make_record()) is None

    def test_time_range_is_inclusive(self, make_record):
        step = TimeRangeFilter(100, 200)

        assert [step.process(make_record(timestamp=ts)) is not None for ts in (99, 100, 150, 200, 201)] == [
            False,
            True,
            True,
            True,
            False,
        ]

    def test_host_filter(self, make_record):
        step = HostFilter("a.example.com")

        assert step.process(make_record(hostname="a.example.com")) is not None
        assert step.process(make_record(hostname="b.example.com")) is None


class TestPipeline:
    """Test pipeline composition"""

    def test_empty_pipeline(self, make_record):
        record = make_record()
        assert Pipeline().process(record) is record

    def test_steps_are_combined(self, make_record):
        pipeline = Pipeline()
        pipeline.add_step(TimeRangeFilter(100, 200))
        pipeline.add_step(HostFilter("a.example.com"))

        records = [
            make_record(timestamp=150, hostname="a.example.com"),
            make_record(timestamp=150, hostname="b.example.com"),
            make_record(timestamp=250, hostname="a.example.com"),
        ]

        assert list(pipeline.run(records)) == records[:1]

    def test_filtered_record_skips_later_steps(self, make_record):
        calls = []

        class RecordingStep(ProcessingStep):
            def process(self, record: LogRecord) -> Optional[LogRecord]:
                calls.append(record)
                return record

        pipeline = Pipeline()
        pipeline.add_step(FilterStep("drop", lambda r: False))
        pipeline.add_step(RecordingStep("recording"))

        assert pipeline.process(make_record()) is None
        assert calls == []


if __name__ == "__main__":
    pytest.main([__file__])
