import json
from unittest.mock import patch

import pytest

from computeforge.cli.apply import apply_command
from computeforge.cli.params import load_parameters, parse_param_args
from computeforge.cli.plan import plan_command
from computeforge.cli.validate import validate_command
from computeforge.core.errors import ExitCode, ValidationError
from computeforge.main import build_parser, main
from computeforge.providers.memory import InMemoryComputeProvider

from conftest import ADDRESS_ID, ATTACHMENT_ID, DISK_ID, INSTANCE_ID, VALID_BAG

PARAMS = [f"{k}={v}" for k, v in VALID_BAG.items()]


@pytest.fixture
def params_file(tmp_path):
    path = tmp_path / "provision.yaml"
    lines = [f"{k}: {v}" for k, v in VALID_BAG.items()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def cli_settings(settings):
    with (
        patch("computeforge.cli.apply.get_settings", return_value=settings),
        patch("computeforge.main.configure_logging"),
    ):
        yield settings


def test_parse_param_args_splits_on_first_equals():
    assert parse_param_args(["image=debian-cloud/debian-12", "labels=a=b"]) == {
        "image": "debian-cloud/debian-12",
        "labels": "a=b",
    }


def test_parse_param_args_rejects_missing_equals():
    with pytest.raises(ValidationError):
        parse_param_args(["project"])


def test_params_override_file_values(params_file):
    bag = load_parameters(["size=99"], params_file)

    assert bag["size"] == "99"
    assert bag["project"] == "acme-prod"


def test_missing_params_file_is_validation_error(tmp_path):
    with pytest.raises(ValidationError):
        load_parameters([], str(tmp_path / "absent.yaml"))


def test_validate_command_accepts_valid_bag(params_file):
    assert validate_command(params_file=params_file) == 0


def test_validate_command_reports_missing_parameter():
    params = [p for p in PARAMS if not p.startswith("machine_type=")]

    assert validate_command(params) == ExitCode.VALIDATION_ERROR


def test_plan_json_lists_apply_order(capsys):
    assert plan_command(PARAMS, output_format="json") == 0

    data = json.loads(capsys.readouterr().out)
    assert [n["identity"] for n in data["order"]] == [ADDRESS_ID, INSTANCE_ID, DISK_ID, ATTACHMENT_ID]
    assert data["order"][3]["depends_on"] == [INSTANCE_ID, DISK_ID]
    assert len(data["edges"]) == 3


def test_plan_text_output(capsys):
    assert plan_command(PARAMS) == 0

    assert "4 resources, 3 dependencies" in capsys.readouterr().out


def test_plan_reports_invalid_bag(capsys):
    assert plan_command(["size=0"], output_format="json") == ExitCode.VALIDATION_ERROR

    assert json.loads(capsys.readouterr().out) == {"error": "Missing required parameter: project"}


def test_apply_with_memory_provider_succeeds(capsys):
    code = apply_command(PARAMS, provider_name="memory", output_format="json")

    data = json.loads(capsys.readouterr().out)
    assert code == ExitCode.SUCCESS
    assert data["status"] == "Success"
    assert [r["status"] for r in data["results"]] == ["Created"] * 4


def test_apply_with_invalid_bag_exits_with_failure_code(capsys):
    code = apply_command(PARAMS + ["additional_disk_size=0"], provider_name="memory")

    assert code == ExitCode.PROVIDER_ERROR
    assert "Failure" in capsys.readouterr().out


def test_apply_text_output_keeps_brackets_in_provider_errors(capsys):
    provider = InMemoryComputeProvider(fail_create={"disk": "quota [/x] [bold]exceeded"})

    with patch("computeforge.cli.apply.provider_from_settings", return_value=provider):
        code = apply_command(PARAMS, provider_name="memory")

    assert code == ExitCode.PARTIAL_FAILURE
    assert "[/x]" in capsys.readouterr().out


def test_apply_uses_configured_defaults(cli_settings, capsys):
    cli_settings.parameter_defaults = {"network": "default"}
    params = [p for p in PARAMS if not p.startswith("network=")]

    assert apply_command(params, provider_name="memory", output_format="json") == 0


def test_parser_accepts_repeated_params():
    args = build_parser().parse_args(["apply", "-p", "a=1", "--param", "b=2", "--provider", "memory"])

    assert args.params == ["a=1", "b=2"]
    assert args.provider == "memory"
    assert args.output == "text"


def test_main_exits_with_command_code(params_file):
    with pytest.raises(SystemExit) as excinfo:
        main(["validate", "--params-file", params_file])

    assert excinfo.value.code == 0


def test_main_unknown_provider_is_config_error(params_file):
    with pytest.raises(SystemExit) as excinfo:
        main(["apply", "--params-file", params_file, "--provider", "nope"])

    assert excinfo.value.code == ExitCode.CONFIG_ERROR


def test_main_without_command_prints_help(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])

    assert excinfo.value.code == 0
    assert "usage: computeforge" in capsys.readouterr().out
