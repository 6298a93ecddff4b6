"""Tests for stack scoring.

Tests cover:
- Filename, wildcard, extension and manifest evidence
- Partial credit for unreadable manifests
- Tie-breaking by signature order
- Determinism and monotonicity
- The bundled signature table
"""

import pytest
from pydantic import ValidationError

from pipeforge.stacks import (
    SIGNATURES,
    SUPPORTED_STACKS,
    UNKNOWN_STACK,
    Evidence,
    Signature,
    StackScorer,
    load_signatures,
    score_stack,
)
from pipeforge.stacks.signatures import compile_pattern


REACT_PACKAGE_JSON = '{"dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0"}}'
NEXT_PACKAGE_JSON = '{"dependencies": {"next": "14.0.0", "react": "^18.2.0"}}'


# =============================================================================
# Signature Table Tests
# =============================================================================

class TestSignatureTable:
    """Tests for the bundled signature table."""

    def test_table_order(self):
        """Table order is the tie-break order."""
        names = [s.name for s in SIGNATURES]
        assert names == [
            "Next.js",
            "React",
            "Vue.js",
            "Angular",
            "Node.js",
            "Python (Django/Flask)",
            "Java (Spring)",
            "Go",
            "Rust",
            ".NET",
            "PHP (Laravel)",
            "Ruby (Rails)",
        ]

    def test_table_is_immutable(self):
        """Signatures are frozen and the table is a tuple."""
        assert isinstance(SIGNATURES, tuple)
        with pytest.raises(ValidationError):
            SIGNATURES[0].priority = 100

    def test_every_supported_stack_has_a_signature(self):
        """Every manually selectable stack can also be detected."""
        assert set(SUPPORTED_STACKS) == {s.name for s in SIGNATURES}

    def test_manifest_needles_loaded_as_tuples(self):
        """Manifest substrings load from YAML."""
        python = next(s for s in SIGNATURES if s.name == "Python (Django/Flask)")
        assert python.manifests["requirements.txt"] == ("django", "flask", "fastapi")
        assert python.priority == 8

    def test_load_rejects_non_list(self, tmp_path):
        """A signature file must be a list."""
        path = tmp_path / "bad.yaml"
        path.write_text("name: Go\n")
        with pytest.raises(ValueError, match="list"):
            load_signatures(path)

    def test_load_rejects_duplicate_names(self, tmp_path):
        """Signature names must be unique."""
        path = tmp_path / "dupes.yaml"
        path.write_text("- {name: Go, priority: 1}\n- {name: Go, priority: 2}\n")
        with pytest.raises(ValueError, match="Duplicate"):
            load_signatures(path)

    def test_priority_must_be_positive(self):
        """Zero priority is rejected."""
        with pytest.raises(ValidationError):
            Signature(name="Broken", priority=0)


class TestFilePatterns:
    """Tests for filename pattern matching."""

    def test_exact_match(self):
        assert compile_pattern("go.mod").fullmatch("go.mod")
        assert not compile_pattern("go.mod").fullmatch("go.mod.bak")

    def test_dots_are_literal(self):
        """Regex metacharacters in names match literally."""
        assert not compile_pattern("next.config.js").fullmatch("nextXconfigXjs")

    def test_wildcard_is_anchored(self):
        """``*`` matches any run but the whole name must match."""
        pattern = compile_pattern("*.csproj")
        assert pattern.fullmatch("MyApp.csproj")
        assert pattern.fullmatch(".csproj")
        assert not pattern.fullmatch("MyApp.csproj.bak")


# =============================================================================
# Scoring Tests
# =============================================================================

class TestScoring:
    """Tests for evidence accumulation."""

    def test_file_evidence(self):
        """Each matching file pattern adds the priority once."""
        scorer = StackScorer()
        scores = scorer.score_all(Evidence.from_files(["go.mod", "main.go"]))
        # go.mod + main.go patterns, plus the .go extension
        assert scores["Go"] == pytest.approx(9 + 9 + 4.5)

    def test_pattern_counts_once_not_per_file(self):
        """Several files matching one pattern add the priority once."""
        scorer = StackScorer()
        evidence = Evidence.from_files(["A.csproj", "B.csproj", "C.csproj"])
        assert scorer.score_all(evidence)[".NET"] == pytest.approx(8)

    def test_extension_evidence(self):
        """A matching extension adds half the priority."""
        scorer = StackScorer()
        assert scorer.score_all(Evidence.from_files(["lib.rs"]))["Rust"] == pytest.approx(4.5)

    def test_manifest_content_evidence(self):
        """Manifest content containing a dependency adds 1.5x priority."""
        scorer = StackScorer()
        evidence = Evidence.from_files(["package.json"], {"package.json": REACT_PACKAGE_JSON})
        scores = scorer.score_all(evidence)
        assert scores == {"React": pytest.approx(12)}
        assert scorer.score(evidence) == "React"

    def test_manifest_without_matching_dependency(self):
        """Content that mentions none of the substrings earns nothing."""
        scorer = StackScorer()
        evidence = Evidence.from_files(["package.json"], {"package.json": '{"name": "tool"}'})
        assert scorer.score_all(evidence) == {}
        assert scorer.score(evidence) == UNKNOWN_STACK

    def test_unreadable_manifest_partial_credit(self):
        """A failed fetch gives 0.3x priority to every signature declaring it."""
        scorer = StackScorer()
        evidence = Evidence.from_files(["package.json"], {"package.json": None})
        scores = scorer.score_all(evidence)

        assert scores["Next.js"] == pytest.approx(3.0)
        assert scores["React"] == pytest.approx(2.4)
        assert scores["Node.js"] == pytest.approx(1.8)
        assert scorer.score(evidence) == "Next.js"

    def test_unfetched_manifest_earns_nothing(self):
        """A manifest that was never fetched gets no content credit."""
        scorer = StackScorer()
        assert scorer.score_all(Evidence.from_files(["package.json"])) == {}

    def test_content_for_absent_manifest_ignored(self):
        """Content only counts when the manifest is in the filename set."""
        scorer = StackScorer()
        evidence = Evidence.from_files(["README.md"], {"package.json": NEXT_PACKAGE_JSON})
        assert scorer.score(evidence) == UNKNOWN_STACK

    def test_next_beats_react_on_shared_manifest(self):
        """Higher priority wins when both match the same manifest."""
        scorer = StackScorer()
        evidence = Evidence.from_files(
            ["package.json", "next.config.js"],
            {"package.json": NEXT_PACKAGE_JSON},
        )
        assert scorer.score(evidence) == "Next.js"

    def test_unknown_for_unrelated_files(self):
        """README alone matches nothing."""
        assert score_stack(Evidence.from_files(["README.md"])) == UNKNOWN_STACK

    def test_empty_evidence(self):
        """No files is valid input and yields Unknown."""
        assert StackScorer().score(Evidence()) == UNKNOWN_STACK

    def test_score_filenames(self):
        """File-only convenience."""
        assert StackScorer().score_filenames(["Cargo.toml", "src"]) == "Rust"


class TestTieBreaking:
    """Tests for deterministic tie-breaking."""

    def test_first_declared_wins(self):
        """Equal scores resolve to the earlier signature."""
        alpha = Signature(name="Alpha", files=("shared.txt",), priority=5)
        beta = Signature(name="Beta", files=("shared.txt",), priority=5)
        evidence = Evidence.from_files(["shared.txt"])

        assert StackScorer([alpha, beta]).score(evidence) == "Alpha"
        assert StackScorer([beta, alpha]).score(evidence) == "Beta"

    def test_builtin_table_tie(self):
        """Python and Java both score 8 from files; Python is listed first."""
        scorer = StackScorer()
        evidence = Evidence.from_files(["pom.xml", "manage.py"])
        scores = scorer.score_all(evidence)

        assert scores["Python (Django/Flask)"] == scores["Java (Spring)"]
        assert scorer.score(evidence) == "Python (Django/Flask)"

    def test_rank_is_stable(self):
        """rank orders by score and keeps table order among ties."""
        scorer = StackScorer()
        ranked = scorer.rank(Evidence.from_files(["pom.xml", "manage.py", "go.mod"]))
        assert [name for name, _ in ranked] == ["Go", "Python (Django/Flask)", "Java (Spring)"]


class TestScoringProperties:
    """Property-style checks over many evidence sets."""

    FILE_POOL = [
        "package.json", "next.config.js", "src/App.tsx", "angular.json", "server.js",
        "manage.py", "requirements.txt", "pom.xml", "go.mod", "main.go", "Cargo.toml",
        "lib.rs", "Api.csproj", "Program.cs", "artisan", "index.php", "Gemfile",
        "config.ru", "README.md", "Dockerfile",
    ]

    def test_deterministic(self):
        """Scoring the same evidence twice yields identical results."""
        scorer = StackScorer()
        evidence = Evidence.from_files(self.FILE_POOL, {"package.json": None})
        assert scorer.score_all(evidence) == scorer.score_all(evidence)
        assert scorer.score(evidence) == scorer.score(evidence)

    def test_filename_order_irrelevant(self):
        """Evidence is a set: order and duplicates do not matter."""
        scorer = StackScorer()
        forward = scorer.score_all(Evidence.from_files(self.FILE_POOL))
        backward = scorer.score_all(Evidence.from_files(list(reversed(self.FILE_POOL)) * 2))
        assert forward == backward

    def test_monotonic_in_filenames(self):
        """Adding a filename never lowers any signature's score."""
        scorer = StackScorer()
        files: list[str] = []
        previous = {s.name: 0.0 for s in SIGNATURES}

        for name in self.FILE_POOL:
            files.append(name)
            evidence = Evidence.from_files(files)
            for signature in SIGNATURES:
                current = scorer.score_signature(signature, evidence)
                assert current >= previous[signature.name]
                previous[signature.name] = current


class TestManifestsToFetch:
    """Tests for lazy manifest selection."""

    def test_only_present_declared_manifests(self):
        """Only manifests that are both declared and present are fetched."""
        scorer = StackScorer()
        wanted = scorer.manifests_to_fetch(
            ["README.md", "pom.xml", "requirements.txt", "package.json", "go.mod"]
        )
        assert wanted == ["package.json", "requirements.txt", "pom.xml"]

    def test_nothing_to_fetch(self):
        assert StackScorer().manifests_to_fetch(["go.mod", "main.go"]) == []
