#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from textwrap import dedent

from sol_imports import mask_source, scan_imports


def _specifiers(src: str):
    return [edge.specifier for edge in scan_imports("Main.sol", dedent(src))]


def test_all_statement_forms():
    specs = _specifiers(
        """
        pragma solidity ^0.8.0;
        import "./A.sol";
        import './B.sol' as B;
        import * as C from "../lib/C.sol";
        import {D, E as F} from "@org/pkg/D.sol";
        contract Main {}
        """
    )

    assert specs == ["./A.sol", "./B.sol", "../lib/C.sol", "@org/pkg/D.sol"]


def test_imports_in_comments_and_strings_are_ignored():
    specs = _specifiers(
        """
        // import "./Commented.sol";
        /*
           import "./Block.sol";
        */
        import "./Real.sol";
        contract Main {
            string constant s = "import \\"./InString.sol\\";";
        }
        """
    )

    assert specs == ["./Real.sol"]


def test_multiline_statement_span_and_position():
    src = 'pragma solidity ^0.8.0;\n\nimport {\n    A,\n    B\n} from "./AB.sol";\ncontract X {}\n'

    [edge] = scan_imports("X.sol", src)

    assert edge.importer == "X.sol"
    assert edge.specifier == "./AB.sol"
    assert edge.line == 3
    assert edge.column == 1
    assert src[edge.start:edge.end] == 'import {\n    A,\n    B\n} from "./AB.sol";'


def test_column_of_indented_import():
    [edge] = scan_imports("X.sol", 'contract X {}\n    import "./Y.sol";\n')

    assert (edge.line, edge.column) == (2, 5)


def test_statement_without_path_literal_is_skipped():
    assert _specifiers("import ;\ncontract X {}\n") == []


def test_identifiers_containing_import_are_not_statements():
    assert _specifiers("contract X { uint importer; function imports() public {} }") == []


def test_mask_preserves_offsets_and_newlines():
    src = 'a // c\n/* x\ny */ "s;t" b'
    masked = mask_source(src)

    assert len(masked) == len(src)
    assert masked.count("\n") == src.count("\n")
    assert ";" not in masked
    assert masked.startswith("a ")
    assert masked.rstrip().endswith("b")
