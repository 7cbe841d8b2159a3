"""Tests for the command-line interface."""

from collections import Counter

import pytest

from external_shuffle import cli


def test_shuffles_file(tmp_path, capsys) -> None:
    input_path = tmp_path / "in.txt"
    input_path.write_text("header\n" + "".join(f"{i}\n" for i in range(20)), encoding="utf-8")
    output_path = tmp_path / "out.txt"

    code = cli.main(
        [str(input_path), str(output_path), "-H", "1", "-t", "4", "-z", "--seed", "7",
         "-s", str(tmp_path)]
    )

    assert code == 0
    output = output_path.read_text(encoding="utf-8").split("\n")[:-1]
    assert Counter(output) == Counter(str(i) for i in range(20))
    assert "20 lines shuffled" in capsys.readouterr().out


def test_missing_positionals_print_usage(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code != 0
    assert "usage:" in capsys.readouterr().err


@pytest.mark.parametrize(
    "flags",
    [
        ["-t", "lots"],
        ["-t", "0"],
        ["-H", "-2"],
        ["-H", "1.5"],
        ["-c", "no-such-charset"],
        ["-c", "hex"],
        ["-c", "base64"],
    ],
)
def test_rejects_bad_flags(tmp_path, flags) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(tmp_path / "in.txt"), str(tmp_path / "out.txt"), *flags])

    assert excinfo.value.code == 2


def test_non_text_charset_leaves_output_untouched(tmp_path) -> None:
    input_path = tmp_path / "in.txt"
    input_path.write_text("a\nb\n", encoding="utf-8")
    output_path = tmp_path / "out.txt"
    output_path.write_text("precious\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(input_path), str(output_path), "-c", "hex"])

    assert excinfo.value.code == 2
    assert output_path.read_text(encoding="utf-8") == "precious\n"


def test_shuffles_file_in_place(tmp_path) -> None:
    path = tmp_path / "data.txt"
    path.write_text("".join(f"{i}\n" for i in range(50)), encoding="utf-8")

    assert cli.main([str(path), str(path), "--seed", "2"]) == 0

    output = path.read_text(encoding="utf-8").split("\n")[:-1]
    assert Counter(output) == Counter(str(i) for i in range(50))


def test_missing_input_fails(tmp_path, caplog) -> None:
    code = cli.main([str(tmp_path / "missing.txt"), str(tmp_path / "out.txt")])

    assert code == 1
    assert "Shuffle failed" in caplog.text
