"""Substring → label rules used to infer frameworks and analytics tools.

Matching is a plain, case-sensitive ``needle in src`` test against script
URLs, so ``/js/react-dom.min.js`` is React while ``/js/REACT.js`` is not.
"""

from typing import List, NamedTuple, Tuple

Rule = Tuple[str, str]


class TechnologySignatures(NamedTuple):
    frameworks: Tuple[Rule, ...]
    analytics: Tuple[Rule, ...]

    def match(self, src: str) -> Tuple[List[str], List[str]]:
        """Return the framework and analytics labels whose needle occurs in *src*.

        A single source may match several rules; the same label may appear
        twice if two needles map to it.  Callers deduplicate.
        """
        frameworks = [label for needle, label in self.frameworks if needle in src]
        analytics = [label for needle, label in self.analytics if needle in src]
        return frameworks, analytics


DEFAULT_SIGNATURES = TechnologySignatures(
    frameworks=(
        ("react", "React"),
        ("vue", "Vue.js"),
        ("angular", "Angular"),
        ("jquery", "jQuery"),
        ("bootstrap", "Bootstrap"),
    ),
    analytics=(
        ("google-analytics", "Google Analytics"),
        ("gtag", "Google Analytics"),
        ("hotjar", "Hotjar"),
        ("segment", "Segment"),
    ),
)
