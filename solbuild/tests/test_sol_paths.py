#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from sol_paths import SourceRoots, locate


def test_locate_finds_nested_sources_by_logical_name(write_sol_file_to, tmp_path):
    root = tmp_path / "contracts"
    write_sol_file_to(root, "Main.sol", "contract Main {}")
    write_sol_file_to(root, "tokens/erc20/Token.sol", "contract Token {}")
    write_sol_file_to(root, "tokens/README.md", "# not solidity")
    write_sol_file_to(root, "scripts/deploy.js", "// nope")

    found = locate(root)

    assert list(found) == ["Main.sol", "tokens/erc20/Token.sol"]
    assert found["tokens/erc20/Token.sol"] == (root / "tokens" / "erc20" / "Token.sol").resolve()
    assert all(path.is_absolute() for path in found.values())


def test_locate_empty_directory(tmp_path):
    assert locate(tmp_path) == {}


def test_locate_missing_root_raises(tmp_path):
    with pytest.raises(FileNotFoundError) as exc:
        locate(tmp_path / "does-not-exist")

    assert "does-not-exist" in str(exc.value)


def test_locate_file_root_raises(write_sol_file_to, tmp_path):
    path = write_sol_file_to(tmp_path, "Lonely.sol", "contract Lonely {}")

    with pytest.raises(NotADirectoryError):
        locate(path)


def test_first_library_root_wins(write_sol_file_to, tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    write_sol_file_to(first, "math/Util.sol", "library First {}")
    write_sol_file_to(second, "math/Util.sol", "library Second {}")
    write_sol_file_to(second, "math/Other.sol", "library Other {}")

    roots = SourceRoots(project_root=tmp_path / "contracts", library_roots=[first, second])
    found = roots.locate_libraries()

    assert found["math/Util.sol"] == (first / "math" / "Util.sol").resolve()
    assert "math/Other.sol" in found


def test_missing_library_roots_are_skipped(write_sol_file_to, tmp_path):
    present = tmp_path / "node_modules"
    write_sol_file_to(present, "lib/A.sol", "contract A {}")

    roots = SourceRoots(project_root=tmp_path / "contracts")
    roots.add_library_root(tmp_path / "missing")
    roots.add_library_root(present)

    assert roots.missing_library_roots() == [tmp_path / "missing"]
    assert list(roots.locate_libraries()) == ["lib/A.sol"]


def test_missing_project_root_is_fatal(tmp_path):
    roots = SourceRoots(project_root=tmp_path / "contracts")

    with pytest.raises(FileNotFoundError):
        roots.locate_project()
