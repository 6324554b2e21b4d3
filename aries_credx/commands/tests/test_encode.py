import json
import os

from tempfile import NamedTemporaryFile
from unittest import TestCase, mock

from .. import encode as command
from ...config.base import SettingsError
from ...config.error import ArgsParseError
from ...config.settings import Settings
from ...encoding.base import AttributeEncoder
from ...encoding.big_number import BigNumber
from ...encoding.field_element import FieldElement


class TestEncode(TestCase):
    def setUp(self):
        patcher = mock.patch.object(command, "common_config", autospec=True)
        self.mock_common_config = patcher.start()
        self.addCleanup(patcher.stop)

    def _execute(self, argv):
        with mock.patch("builtins.print", mock.MagicMock()) as mock_print:
            command.execute(argv)
        mock_print.assert_called_once()
        return json.loads(mock_print.call_args[0][0])

    def _write_attributes(self, text):
        attr_file = NamedTemporaryFile("w", suffix=".yml", delete=False)
        self.addCleanup(os.remove, attr_file.name)
        with attr_file:
            attr_file.write(text)
        return attr_file.name

    def test_execute_attrs(self):
        result = self._execute(
            ["--attr", "age=isize:-42", "--attr", "first_name=Alice", "--attr", "nick"]
        )
        encoder = AttributeEncoder(FieldElement)
        assert result == {
            "age": {
                "raw": "-42",
                "encoded": str(int(encoder.encode_from_isize(-42))),
            },
            "first_name": {
                "raw": "Alice",
                "encoded": str(int(encoder.encode_from_utf8_as_hash("Alice"))),
            },
            "nick": {"raw": None, "encoded": "7"},
        }
        self.mock_common_config.assert_called_once()

    def test_execute_attributes_file(self):
        path = self._write_attributes(
            "- name: height\n"
            "  encoding: f64\n"
            "  value: 1.75\n"
            "- name: birthdate\n"
            "  encoding: dayssince1900\n"
            "  value: '1982-12-20T10:45:00.000-06:00'\n"
        )
        result = self._execute(
            ["--backend", "big_number", "--int-bits", "32", "--attributes", path]
        )
        encoder = AttributeEncoder(BigNumber, int_bits=32)
        assert list(result) == ["height", "birthdate"]
        assert result["height"] == {
            "raw": "1.75",
            "encoded": str(int(encoder.encode_from_f64(1.75))),
        }
        assert result["birthdate"]["encoded"] == str(
            int(
                encoder.encode_from_rfc3339_as_dayssince1900(
                    "1982-12-20T10:45:00.000-06:00"
                )
            )
        )

    def test_execute_no_attributes(self):
        with mock.patch.object(
            command.ArgumentParser, "print_help"
        ) as mock_print_help, self.assertRaises(ArgsParseError):
            command.execute([])
        mock_print_help.assert_called_once()
        self.mock_common_config.assert_not_called()

    def test_execute_bad_backend(self):
        with self.assertRaises(SystemExit):
            command.execute(["--backend", "rsa", "--attr", "age=1"])

    def test_execute_bad_value(self):
        with self.assertRaises(SystemExit) as ctx:
            command.execute(["--attr", "age=usize:-1"])
        message = str(ctx.exception.code)
        assert message.startswith("credx encode: Error encoding attributes.")
        assert "not an unsigned 64-bit integer" in message

    def test_duplicate_names(self):
        with self.assertRaises(SystemExit) as ctx:
            command.execute(["--attr", "age=1", "--attr", "age=2"])
        assert "Duplicate attribute name: age" in str(ctx.exception.code)

    def test_execute_bad_attributes_file(self):
        with self.assertRaises(SystemExit) as ctx:
            command.execute(["--attributes", "/no/such/attributes.yml"])
        assert "Unable to read attributes file" in str(ctx.exception.code)

    def test_load_attributes_file_x(self):
        with self.assertRaises(command.EncodeError):
            command.load_attributes_file(self._write_attributes("name: age\n"))
        with self.assertRaises(command.EncodeError):
            command.load_attributes_file(self._write_attributes("- [unbalanced\n"))
        with self.assertRaises(command.EncodeError):
            command.load_attributes_file("/no/such/attributes.yml")

    def test_encode_settings(self):
        result = command.encode(
            Settings(
                {
                    "encoding.digest": "sha3_256",
                    "encode.attributes": [{"name": "city", "value": "Paris"}],
                }
            )
        )
        encoder = AttributeEncoder(FieldElement)
        assert result["city"]["encoded"] == str(
            int(encoder.encode_from_utf8_as_hash("Paris", "sha3_256"))
        )

    def test_encode_bad_settings(self):
        attrs = [{"name": "age", "value": 42}]
        with self.assertRaises(command.EncodeError) as ctx:
            command.encode(
                Settings({"encoding.int_bits": "wide", "encode.attributes": attrs})
            )
        assert isinstance(ctx.exception.__cause__, SettingsError)
        with self.assertRaises(command.EncodeError):
            command.encode(
                Settings({"encoding.backend": "rsa", "encode.attributes": attrs})
            )
