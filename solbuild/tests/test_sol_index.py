#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from sol_index import Collision, Tier, UnitIndex
from sol_units import SourceUnit, UnitOrigin


def test_project_wins_over_library_and_alias():
    index = UnitIndex.from_sources(
        project={"Token.sol": "contract ProjectToken {}", "lib/Math.sol": "library ProjectMath {}"},
        library={"vendor/Token.sol": "contract LibToken {}", "lib/Math.sol": "library LibMath {}"},
    )

    unit, tier = index.lookup_with_tier("Token.sol")
    assert tier is Tier.PROJECT
    assert "ProjectToken" in unit.raw_content

    unit, tier = index.lookup_with_tier("lib/Math.sol")
    assert tier is Tier.PROJECT
    assert "ProjectMath" in unit.raw_content


def test_alias_resolves_to_library_unit_under_canonical_name():
    index = UnitIndex.from_sources(library={"vendor/oz/math/Util.sol": "library Util {}"})

    unit, tier = index.lookup_with_tier("math/Util.sol")

    assert tier is Tier.ALIAS
    assert unit.logical_name == "vendor/oz/math/Util.sol"
    assert unit.origin is UnitOrigin.LIBRARY
    assert index.lookup("Util.sol") is unit
    assert index.lookup("vendor/oz/math/Util.sol") is unit


def test_missing_name():
    index = UnitIndex.from_sources(project={"A.sol": ""})

    assert index.lookup("B.sol") is None
    assert "B.sol" not in index
    assert "A.sol" in index


def test_collisions_are_listed():
    index = UnitIndex.from_sources(
        project={"Token.sol": ""},
        library={"vendor/Token.sol": "", "Token.sol": ""},
    )

    collisions = index.collisions()

    assert Collision("Token.sol", Tier.PROJECT, Tier.LIBRARY) in collisions
    # The alias is not registered over the library original, so no alias collision.
    assert index.tiers_for("Token.sol") == [Tier.PROJECT, Tier.LIBRARY]


def test_alias_to_unknown_unit_is_rejected():
    with pytest.raises(ValueError):
        UnitIndex(aliases={"Util.sol": "vendor/Util.sol"})


def test_from_paths_reads_files_and_aliases_by_path(write_sol_file_to, tmp_path):
    lib = tmp_path / "node_modules"
    contracts = tmp_path / "contracts"
    util = write_sol_file_to(lib, "pkg/math/Util.sol", "library Util {}\n")
    main = write_sol_file_to(contracts, "Main.sol", "contract Main {}\n")

    index = UnitIndex.from_paths({"Main.sol": main}, {"pkg/math/Util.sol": util})

    assert index.project["Main.sol"].path == main
    assert index.aliases == {"math/Util.sol": "pkg/math/Util.sol", "Util.sol": "pkg/math/Util.sol"}
    assert index.lookup("Util.sol").raw_content == "library Util {}\n"
    assert list(index) == ["Main.sol", "Util.sol", "math/Util.sol", "pkg/math/Util.sol"]


def test_source_unit_identity_includes_origin():
    project = SourceUnit("Util.sol", "library A {}")
    library = SourceUnit("Util.sol", "library A {}", origin=UnitOrigin.LIBRARY)

    assert project.key == ("project", "Util.sol")
    assert library.key == ("library", "Util.sol")
    assert project.directory == library.directory == ""
