"""Stack Scorer - ranks technology stacks from filesystem evidence.

Scoring is a pure function over ``Evidence``. Manifest contents can be
pre-fetched by the caller or collected lazily with ``gather_evidence``,
which fans fetches out concurrently and maps every failure to the
partial-credit path.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Awaitable, Callable, Iterable, Mapping, Sequence

from pipeforge.config import settings
from pipeforge.stacks.signatures import SIGNATURES, Signature

logger = logging.getLogger(__name__)

UNKNOWN_STACK = "Unknown"

# Evidence weights, relative to a signature's priority
FILE_WEIGHT = 1.0
EXTENSION_WEIGHT = 0.5
MANIFEST_WEIGHT = 1.5
UNREADABLE_MANIFEST_WEIGHT = 0.3

ContentFetcher = Callable[[str], Awaitable[str | None]]
StackScore = dict[str, float]


@dataclass(frozen=True)
class Evidence:
    """Observed project files plus any manifest contents retrieved so far.

    ``contents`` maps a manifest filename to its text, or to ``None`` when
    the fetch failed. Manifests absent from ``contents`` were never fetched
    and earn no content credit.
    """
    filenames: frozenset[str] = frozenset()
    contents: Mapping[str, str | None] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_files(
        cls,
        filenames: Iterable[str],
        contents: Mapping[str, str | None] | None = None,
    ) -> "Evidence":
        return cls(
            filenames=frozenset(filenames),
            contents=MappingProxyType(dict(contents or {})),
        )

    def fetch_failed(self, manifest: str) -> bool:
        return manifest in self.contents and self.contents[manifest] is None


class StackScorer:
    """Weighted-evidence stack ranking over a signature table."""

    def __init__(self, signatures: Sequence[Signature] = SIGNATURES, concurrency: int | None = None):
        if concurrency is None:
            concurrency = settings.fetch_concurrency
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.signatures = tuple(signatures)
        self.concurrency = concurrency

    def score_signature(self, signature: Signature, evidence: Evidence) -> float:
        """Accumulate one signature's score from all three evidence classes."""
        files = evidence.filenames
        score = 0.0

        for pattern in signature.file_patterns:
            if any(pattern.fullmatch(f) for f in files):
                score += signature.priority * FILE_WEIGHT

        for ext in signature.extensions:
            if any(f.endswith(ext) for f in files):
                score += signature.priority * EXTENSION_WEIGHT

        for manifest, needles in signature.manifests.items():
            if manifest not in files:
                continue
            if evidence.fetch_failed(manifest):
                score += signature.priority * UNREADABLE_MANIFEST_WEIGHT
                continue
            content = evidence.contents.get(manifest)
            if content and any(needle in content for needle in needles):
                score += signature.priority * MANIFEST_WEIGHT

        return score

    def score_all(self, evidence: Evidence) -> StackScore:
        """Score every signature, keeping only candidates above zero.

        The result preserves signature-table order.
        """
        scores: StackScore = {}
        for signature in self.signatures:
            score = self.score_signature(signature, evidence)
            if score > 0:
                scores[signature.name] = score
        return scores

    def rank(self, evidence: Evidence) -> list[tuple[str, float]]:
        """Candidates by descending score; ties keep table order."""
        return sorted(self.score_all(evidence).items(), key=lambda item: -item[1])

    def score(self, evidence: Evidence) -> str:
        """Return the winning stack name, or ``UNKNOWN_STACK``."""
        best_name = UNKNOWN_STACK
        best_score = 0.0
        for name, score in self.score_all(evidence).items():
            if score > best_score:
                best_name, best_score = name, score
        return best_name

    def score_filenames(self, filenames: Iterable[str]) -> str:
        """Score from filenames alone, without manifest contents."""
        return self.score(Evidence.from_files(filenames))

    def manifests_to_fetch(self, filenames: Iterable[str]) -> list[str]:
        """Manifests declared by some signature and present in the filenames."""
        present = set(filenames)
        wanted: list[str] = []
        for signature in self.signatures:
            for manifest in signature.manifests:
                if manifest in present and manifest not in wanted:
                    wanted.append(manifest)
        return wanted

    async def gather_evidence(self, filenames: Iterable[str], fetcher: ContentFetcher) -> Evidence:
        """Build evidence, fetching only the manifests that can affect a score.

        Fetches run concurrently, bounded by ``self.concurrency``. A fetch
        that raises, is cancelled, or returns ``None`` is recorded as failed.
        """
        files = frozenset(filenames)
        manifests = self.manifests_to_fetch(files)
        if not manifests:
            return Evidence(filenames=files)

        semaphore = asyncio.Semaphore(self.concurrency)

        async def fetch_one(manifest: str) -> str | None:
            async with semaphore:
                return await fetcher(manifest)

        started = time.monotonic()
        results = await asyncio.gather(
            *(fetch_one(m) for m in manifests),
            return_exceptions=True,
        )

        contents: dict[str, str | None] = {}
        for manifest, result in zip(manifests, results):
            if isinstance(result, BaseException):
                logger.warning(
                    f"Could not fetch {manifest}: {type(result).__name__}: {result}",
                    extra={"manifest": manifest},
                )
                contents[manifest] = None
            else:
                contents[manifest] = result if isinstance(result, str) else None

        logger.debug(
            f"Fetched {len(manifests)} manifest(s)",
            extra={"duration_ms": (time.monotonic() - started) * 1000},
        )
        return Evidence(filenames=files, contents=MappingProxyType(contents))

    async def detect(self, filenames: Iterable[str], fetcher: ContentFetcher) -> str:
        """Fetch the relevant manifests, then score."""
        evidence = await self.gather_evidence(filenames, fetcher)
        stack = self.score(evidence)
        logger.info(f"Detected stack: {stack}", extra={"stack": stack})
        return stack


stack_scorer = StackScorer()


def score_stack(evidence: Evidence) -> str:
    """Score evidence with the built-in signature table."""
    return stack_scorer.score(evidence)
