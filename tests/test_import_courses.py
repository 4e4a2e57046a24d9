import io
import json

import pandas as pd
import pytest
from import_courses import frame_to_text, main, read_input


class TestFrameToText:
    def test_rows_become_tab_lines(self):
        df = pd.DataFrame([["高等数学", "5.0", "92"], ["大学物理", None, "85"]])
        assert frame_to_text(df) == "高等数学\t5.0\t92\n大学物理\t85"

    def test_blank_rows_dropped(self):
        df = pd.DataFrame([[None, None], ["a", "b"]])
        assert frame_to_text(df) == "a\tb"


class TestReadInput:
    def test_text_file(self, tmp_path):
        path = tmp_path / "grades.md"
        path.write_text("| 高等数学 | 5.0 | 92 |", encoding="utf-8")
        assert read_input(str(path)) == "| 高等数学 | 5.0 | 92 |"

    def test_csv(self, tmp_path):
        path = tmp_path / "grades.csv"
        path.write_text("课程,学分,成绩\n高等数学,5.0,92\n", encoding="utf-8")
        assert read_input(str(path)) == "课程\t学分\t成绩\n高等数学\t5.0\t92"

    def test_xlsx(self, tmp_path):
        path = tmp_path / "grades.xlsx"
        pd.DataFrame([["课程", "学分", "成绩"], ["线性代数", "4", "优秀"]]).to_excel(
            path, header=False, index=False, engine="openpyxl",
        )
        assert read_input(str(path)) == "课程\t学分\t成绩\n线性代数\t4\t优秀"

    def test_stdin(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("英语 3 85"))
        assert read_input("-") == "英语 3 85"


class TestMain:
    def test_table_output(self, tmp_path, capsys):
        path = tmp_path / "grades.txt"
        path.write_text("高等数学 5 90\n大学物理 3 60\n", encoding="utf-8")
        assert main([str(path)]) == 0
        out = capsys.readouterr().out
        assert "Recognized 2 course(s)" in out
        assert "Weighted average: 78.75" in out
        assert "GPA: 2.88" in out

    def test_json_output(self, tmp_path, capsys):
        path = tmp_path / "grades.txt"
        path.write_text("高等数学 5 90\n大学物理 3 60\n", encoding="utf-8")
        assert main([str(path), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["mode"] == "local"
        assert data["stats"]["count"] == 2
        assert data["stats"]["gpa"] == pytest.approx(2.875)

    def test_nothing_recognized(self, tmp_path, capsys):
        path = tmp_path / "grades.txt"
        path.write_text("|---|---|\n", encoding="utf-8")
        assert main([str(path)]) == 1
        assert "No valid courses recognized" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.txt")]) == 1
        assert "[FATAL]" in capsys.readouterr().err

    def test_ai_mode_without_key(self, tmp_path, capsys, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        path = tmp_path / "grades.txt"
        path.write_text("高等数学 5 90\n", encoding="utf-8")
        assert main([str(path), "--mode", "ai"]) == 1

    def test_table_lists_distribution(self, tmp_path, capsys):
        path = tmp_path / "grades.txt"
        path.write_text("高等数学 5 90\n大学物理 3 60\n", encoding="utf-8")
        assert main([str(path)]) == 0
        out = capsys.readouterr().out
        assert "90-100 (优)" in out
        assert "5 credits" in out

    def test_no_planned_switch(self, tmp_path, capsys):
        path = tmp_path / "grades.txt"
        path.write_text("高等数学 5 90\n", encoding="utf-8")
        with pytest.raises(SystemExit):
            main([str(path), "--include-planned"])
        assert "--include-planned" in capsys.readouterr().err
