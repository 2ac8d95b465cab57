"""
In-process CLI tests through ``main(argv)``.
"""

import logging

import pytest

from securecrypt.cli import main, read_value_or_file


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    # handlers captured the per-test stderr stream
    logger = logging.getLogger("securecrypt")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_encode_and_decode(capsys):
    assert main(["encode", "caesar", "HELLO", "-k", "3"]) == 0
    assert capsys.readouterr().out.strip() == "KHOOR"
    assert main(["decode", "base64", "SGVsbG8="]) == 0
    assert capsys.readouterr().out.strip() == "Hello"


def test_text_can_come_from_a_file(tmp_path, capsys):
    path = tmp_path / "cipher.txt"
    path.write_text("KHOOR\n")
    assert read_value_or_file(str(path)) == "KHOOR"
    assert main(["decode", "caesar", str(path), "-k", "3"]) == 0
    assert capsys.readouterr().out.strip() == "HELLO"


def test_bruteforce_output(capsys):
    assert main(["bruteforce", "KHOOR", "-c", "classical", "-n", "1", "-p"]) == 0
    captured = capsys.readouterr()
    assert "Caesar (shift 3)" in captured.out and "HELLO" in captured.out
    assert "100.0%" in captured.err, f"Progress missing from stderr: {captured.err}"


def test_algorithm_errors_exit_2(capsys):
    assert main(["decode", "hill", "HIAT", "-k", "2,4,6,8"]) == 2
    assert "Error" in capsys.readouterr().err
    assert main(["encode", "enigma", "HELLO"]) == 2


def test_feedback_stats_reset_cycle(capsys, isolated_model_path):
    assert main(["predict", "SGVsbG8gV29ybGQ="]) == 0
    assert "Base64" in capsys.readouterr().out

    assert main(["feedback", "SGVsbG8gV29ybGQ=", "correct"]) == 0
    assert "Recorded: Base64 -> Base64" in capsys.readouterr().out
    assert isolated_model_path.exists(), "Model was not written to SECURECRYPT_MODEL_PATH"

    assert main(["stats"]) == 0
    assert "training examples: 1" in capsys.readouterr().out

    assert main(["reset"]) == 0
    capsys.readouterr()
    assert main(["stats"]) == 0
    assert "training examples: 0" in capsys.readouterr().out


def test_feedback_rank_out_of_range(capsys):
    assert main(["feedback", "SGVsbG8gV29ybGQ=", "incorrect", "-r", "99", "--actual", "Hexadecimal"]) == 2


def test_model_flag_overrides_env(tmp_path, capsys):
    model = tmp_path / "other" / "m.json"
    assert main(["--model", str(model), "feedback", "48656c6c6f", "correct"]) == 0
    assert model.exists()


def test_bad_environment_is_reported(monkeypatch, capsys):
    monkeypatch.setenv("SECURECRYPT_BATCH_SIZE", "0")
    assert main(["stats"]) == 2
    assert "batch_size" in capsys.readouterr().err
