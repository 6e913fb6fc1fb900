import json
import zipfile
from pathlib import Path

from code_batcher import cli


def make_project(root: Path) -> Path:
    files = {
        ".gitignore": "node_modules/\ndist/\n*.log\n",
        "package.json": '{"name": "demo"}\n',
        "package-lock.json": "{}\n",
        ".env": "SECRET=1\n",
        "node_modules/left-pad/index.js": "module.exports = 1;\n",
        "dist/bundle.js": "bundle\n",
        "server.log": "log\n",
        "src/index.ts": "export const a = 1;\r\nexport const b = 2;\r\n",
        "src/routes/users.ts": "export default [];\n",
        "src/routes/empty.ts": "",
    }
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode("utf-8"))
    (root / "assets").mkdir()
    return root


def test_end_to_end_scan_select_and_batch(tmp_path: Path) -> None:
    project = make_project(tmp_path / "demo")
    tree_file = tmp_path / "tree.json"

    assert cli.main(["scan", str(project), "--output", str(tree_file)]) == 0
    tree = json.loads(tree_file.read_text(encoding="utf-8"))["tree"]
    assert [n["name"] for n in tree] == ["package.json", "src"]

    src = tree[1]
    assert [n["name"] for n in src["children"]] == ["index.ts", "routes"]
    src["children"][1]["selected"] = True
    selection = tmp_path / "selection.json"
    selection.write_text(json.dumps({"selectedTree": tree}), encoding="utf-8")

    summary_file = tmp_path / "summary.json"
    exit_code = cli.main(
        ["batch", str(project), "--selection", str(selection), "--output", str(summary_file)],
    )

    assert exit_code == 0
    summary = json.loads(summary_file.read_text(encoding="utf-8"))
    assert summary["totalFiles"] == 2
    assert summary["totalBatches"] == 1
    content = summary["batches"][0]["content"]
    assert content.startswith("*** empty.ts ***\n*** src/routes/empty.ts ***\nEmpty File/No content\n")
    assert "*** users.ts ***\n*** src/routes/users.ts ***\nexport default [];\n" in content
    assert "index.ts" not in content


def test_end_to_end_download_keeps_original_line_endings(tmp_path: Path) -> None:
    project = make_project(tmp_path / "demo")
    tree_file = tmp_path / "tree.json"
    assert cli.main(["scan", str(project), "--output", str(tree_file)]) == 0
    tree = json.loads(tree_file.read_text(encoding="utf-8"))
    tree["tree"][1]["children"][0]["selected"] = True
    tree_file.write_text(json.dumps(tree), encoding="utf-8")
    output = tmp_path / "combined.txt"

    exit_code = cli.main(
        ["download", str(project), "--selection", str(tree_file), "--output", str(output)],
    )

    assert exit_code == 0
    assert output.read_bytes() == (
        b"*** index.ts ***\n*** src/index.ts ***\n"
        b"export const a = 1;\r\nexport const b = 2;\r\n\n\n"
        b"----------- End of File -----------\n\n"
    )


def test_end_to_end_aggregate_zip(tmp_path: Path) -> None:
    project = make_project(tmp_path / "demo")
    output = tmp_path / "aggregate.zip"

    exit_code = cli.main(["aggregate", str(project), "--lines-per-batch", "6", "--output", str(output)])

    assert exit_code == 0
    with zipfile.ZipFile(output) as zf:
        names = zf.namelist()
        text = "\n".join(zf.read(n).decode("utf-8") for n in names)
    assert names[0] == "batch-1.txt"
    assert all(name.startswith("batch-") for name in names)
    for rel in ("package.json", "src/index.ts", "src/routes/empty.ts", "src/routes/users.ts"):
        assert f"*** {rel} ***" in text
    for hidden in ("left-pad", "bundle", "server.log", "package-lock.json", "SECRET"):
        assert hidden not in text
