import json

import pytest

from traffic_analytics.parsers.base import BaseParser, LogRecord, ParserError
from traffic_analytics.parsers.json_parser import TransactionLogParser


@pytest.fixture
def parser():
    return TransactionLogParser()


class TestLogRecord:
    """Test record classification"""

    @pytest.mark.parametrize(
        "status,is_error,is_success",
        [(200, False, True), (201, False, False), (399, False, False), (400, True, False), (503, True, False)],
    )
    def test_classification(self, make_record, status, is_error, is_success):
        record = make_record(status=status)

        assert record.is_error is is_error
        assert record.is_success is is_success

    def test_abstract_parser(self):
        """Test that BaseParser is abstract"""

        class IncompleteParser(BaseParser):
            def parse_line(self, line):
                return None

        with pytest.raises(TypeError):
            IncompleteParser()


class TestTransactionLogParser:
    """Test JSON transaction log parsing"""

    def test_parse_line(self, parser, make_document):
        document = make_document(1700000000.5, status=404, ip="192.168.1.7", method="post")
        record = parser.parse_line(json.dumps(document))

        assert record == LogRecord(
            timestamp=1700000000.5,
            hostname="api.example.com",
            path="/users",
            method="post",
            response_status=404,
            response_time=50.0,
            client_ip="192.168.1.7",
        )

    def test_blank_line(self, parser):
        assert parser.parse_line("") is None
        assert parser.parse_line("   ") is None

    def test_invalid_json(self, parser):
        with pytest.raises(ParserError, match="Invalid JSON"):
            parser.parse_line("{not json")

    def test_missing_fields(self, parser, make_document):
        document = make_document(1000)
        del document["session_analytics"]
        del document["response"]["status"]

        with pytest.raises(ParserError) as exc_info:
            parser.parse_document(document)

        message = str(exc_info.value)
        assert "response.status" in message
        assert "session_analytics.ip_address" in message

    def test_not_an_object(self, parser):
        with pytest.raises(ParserError, match="Expected a JSON object"):
            parser.parse_line("[1, 2, 3]")

    def test_string_values_are_converted(self, parser, make_document):
        document = make_document("1700000000", status="502", response_time="12.5")
        record = parser.parse_document(document)

        assert record.timestamp == 1700000000.0
        assert record.response_status == 502
        assert record.response_time == 12.5

    @pytest.mark.parametrize(
        "overrides,match",
        [
            ({"ts": "yesterday"}, "Invalid timestamp"),
            ({"ts": True}, "Invalid timestamp"),
            ({"status": "OK"}, "Invalid response status"),
            ({"response_time": "fast"}, "Invalid response time"),
        ],
    )
    def test_malformed_values(self, parser, make_document, overrides, match):
        ts = overrides.pop("ts", 1000)
        document = make_document(ts, **overrides)

        with pytest.raises(ParserError, match=match):
            parser.parse_document(document)

    def test_extra_fields_are_ignored(self, parser, make_document):
        document = make_document(1000)
        document["request"] = {"headers": {"accept": "application/json"}}

        assert parser.parse_document(document).timestamp == 1000

    def test_supports_format(self, parser, make_document):
        assert parser.supports_format(json.dumps(make_document(1000)))
        assert not parser.supports_format('{"message": "hello"}')
        assert not parser.supports_format("127.0.0.1 - - [10/Oct/2000:13:55:36] GET /")


if __name__ == "__main__":
    pytest.main([__file__])
