import json

import numpy as np
import pandas as pd
import pytest

from permtest.cli import infer_group_order, main, parse_values


def test_parse_values_handles_missing():
    vals = parse_values("1, 2.5,nan,,4")
    assert vals[0] == 1.0 and vals[1] == 2.5 and vals[4] == 4.0
    assert np.isnan(vals[2]) and np.isnan(vals[3])


def test_infer_group_order_puts_treatment_first():
    assert infer_group_order(pd.Series(["control", "treatment", "control"])) == ("treatment", "control")
    assert infer_group_order(pd.Series(["x", "w"])) == ("w", "x")


def test_precision_command(capsys):
    assert main(["precision", "--precision", "0.01", "--alpha", "0.05", "--ci", "2"]) == 0
    assert "1900" in capsys.readouterr().out


def test_test_command_exact_with_json(tmp_path, capsys):
    out = tmp_path / "report.json"
    code = main(["test", "--sample1", "1,2,3", "--sample2", "4,5", "--exact", "--json", str(out)])
    assert code == 0
    assert "p-value" in capsys.readouterr().out

    report = json.loads(out.read_text())
    assert report["result"]["p_value"] == pytest.approx(1 / 11)
    assert report["result"]["n_permutations"] == 10
    assert "null_distribution" not in report["result"]


def test_test_command_from_csv(tmp_path, capsys):
    path = tmp_path / "data.csv"
    pd.DataFrame({
        "group": ["control"] * 4 + ["treatment"] * 4,
        "value": [1.0, 2.0, 1.5, 2.5, 4.0, 5.0, np.nan, 4.5],
    }).to_csv(path, index=False)

    out = tmp_path / "report.json"
    main(["test", "--input", str(path), "--exact", "--sidedness", "larger", "--json", str(out)])
    report = json.loads(out.read_text())
    assert report["inputs"]["first"] == "treatment"
    assert report["result"]["observed_difference"] == pytest.approx(4.5 - 1.75)


def test_missing_samples_is_usage_error():
    with pytest.raises(SystemExit) as exc:
        main(["test"])
    assert exc.value.code == 2
