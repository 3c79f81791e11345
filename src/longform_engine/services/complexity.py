"""Visual-direction complexity analysis.

Scores how hard a free-text visual direction is for a generation backend to
render faithfully, using keyword detection over five factors: specific
actions, material properties, precise motion, specific elements and temporal
sequencing. Produces remediation hints (simplified prompt, alternative
approach, backend short-list) consumed by the router and regeneration engine.
"""

import re

from longform_engine.domain.enums import AlternativeApproach, ComplexityCategory, Difficulty
from longform_engine.domain.models import (
    ComplexityAnalysis,
    ComplexityFactors,
    ComplexityRecommendations,
    FactorAnalysis,
)
from longform_engine.logging import get_logger

logger = get_logger(__name__)

SPECIFIC_ACTION_KEYWORDS = (
    "stretching", "pulling", "kneading", "folding", "twisting",
    "pouring", "dripping", "splashing", "melting", "freezing",
    "cracking", "breaking", "tearing", "cutting", "slicing",
    "threading", "weaving", "sewing", "typing", "writing",
    "peeling", "rolling", "flipping", "tossing", "catching",
    "stirring", "mixing", "whisking", "grinding", "chopping",
)  # fmt: skip

MATERIAL_PROPERTY_KEYWORDS = (
    "translucent", "transparent", "opaque", "glossy", "matte",
    "liquid", "viscous", "stretchy", "elastic", "rigid",
    "soft", "fluffy", "crispy", "crunchy", "smooth",
    "wet", "dry", "steaming", "bubbling", "fizzing",
    "shiny", "reflective", "glowing", "sparkling", "shimmering",
)  # fmt: skip

HARD_MATERIALS = frozenset(
    {"translucent", "transparent", "liquid", "viscous", "reflective", "glowing"}
)

PRECISE_MOTION_KEYWORDS = (
    "outward", "inward", "clockwise", "counter-clockwise",
    "slowly", "quickly", "precisely", "carefully",
    "from left to right", "from top to bottom",
    "in circular motion", "back and forth",
    "upward", "downward", "sideways", "diagonal",
)  # fmt: skip

SPECIFIC_ELEMENTS = (
    "pizza dough", "bread dough", "pasta", "rolling pin",
    "wooden spoon", "chef knife", "cutting board",
    "mortar and pestle", "whisk", "spatula", "ladle",
    "herbs", "spices", "flour", "sugar", "salt",
)  # fmt: skip

TEMPORAL_KEYWORDS = (
    "then", "after", "before", "while", "during", "until", "as soon as", "next", "finally",
)

ACTION_SCORES = {Difficulty.VERY_HARD: 0.4, Difficulty.HARD: 0.3, Difficulty.EASY: 0.2}
MATERIAL_SCORES = {Difficulty.VERY_HARD: 0.4, Difficulty.HARD: 0.3, Difficulty.EASY: 0.2}
MOTION_SCORES = {Difficulty.VERY_HARD: 0.3, Difficulty.HARD: 0.2, Difficulty.EASY: 0.1}

# (subject keywords, best backends, avoid backends). Later rules override earlier
# best-lists; avoid-lists are only replaced by rules that declare one.
SUBJECT_RULES: tuple[tuple[tuple[str, ...], tuple[str, ...], tuple[str, ...] | None], ...] = (
    (("hand", "finger"), ("kling-2.5-turbo", "runway-gen3"), ("hailuo-minimax", "wan-2.1")),
    (("food", "dough", "cooking"), ("kling-2.5-turbo", "luma-dream-machine"), ("seedance-1.0",)),
    (("product", "bottle", "package"), ("luma-dream-machine", "kling-2.1", "veo-3.1"), None),
    (("nature", "forest", "landscape"), ("veo-3.1", "veo-2", "hailuo-minimax"), None),
    (("person", "face", "people"), ("kling-2.5-turbo", "kling-2.1", "runway-gen3"), ("hailuo-minimax",)),
    (("cinematic", "dramatic", "epic"), ("veo-3.1", "runway-gen3", "kling-2.0"), None),
)

IMPOSSIBLE_WARNING = (
    "This visual direction is extremely specific and may be impossible for current "
    "AI video models. Consider using stock footage or simplifying the requirements."
)


def _found(text: str, keywords: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(k for k in keywords if k in text)


class ComplexityAnalyzer:
    """Keyword-based complexity scorer. Stateless and deterministic."""

    def analyze(self, visual_direction: str) -> ComplexityAnalysis:
        lower = visual_direction.lower()

        factors = ComplexityFactors(
            specific_action=self._specific_actions(lower),
            material_properties=self._material_properties(lower),
            motion_requirements=self._motion_requirements(lower),
            element_count=len(_found(lower, SPECIFIC_ELEMENTS)),
            temporal_sequence=any(k in lower for k in TEMPORAL_KEYWORDS),
        )
        score = self.score(factors)
        category = self.categorize(score)

        analysis = ComplexityAnalysis(
            score=score,
            category=category,
            factors=factors,
            recommendations=self._recommendations(visual_direction, factors, category),
            user_warning=self._warning(category, factors),
        )

        logger.debug(
            "complexity_analyzed",
            score=round(score, 2),
            category=str(category),
            direction=visual_direction[:60],
        )
        return analysis

    @staticmethod
    def score(factors: ComplexityFactors) -> float:
        """Additive factor score, capped at 1.0."""
        total = 0.0
        if factors.specific_action.detected:
            total += ACTION_SCORES[factors.specific_action.difficulty]
        if factors.material_properties.detected:
            total += MATERIAL_SCORES[factors.material_properties.difficulty]
        if factors.motion_requirements.detected:
            total += MOTION_SCORES[factors.motion_requirements.difficulty]
        total += min(factors.element_count * 0.05, 0.2)
        if factors.temporal_sequence:
            total += 0.1
        return min(round(total, 4), 1.0)

    @staticmethod
    def categorize(score: float) -> ComplexityCategory:
        if score >= 0.8:
            return ComplexityCategory.IMPOSSIBLE
        if score >= 0.5:
            return ComplexityCategory.COMPLEX
        if score >= 0.3:
            return ComplexityCategory.MODERATE
        return ComplexityCategory.SIMPLE

    def _specific_actions(self, text: str) -> FactorAnalysis:
        found = _found(text, SPECIFIC_ACTION_KEYWORDS)
        if not found:
            return FactorAnalysis(detected=False)

        if "hand" in text or "finger" in text:
            difficulty = Difficulty.VERY_HARD
        elif len(found) > 1:
            difficulty = Difficulty.HARD
        else:
            difficulty = Difficulty.EASY
        return FactorAnalysis(detected=True, difficulty=difficulty, matches=found)

    def _material_properties(self, text: str) -> FactorAnalysis:
        found = _found(text, MATERIAL_PROPERTY_KEYWORDS)
        if not found:
            return FactorAnalysis(detected=False)

        if any(p in HARD_MATERIALS for p in found):
            difficulty = Difficulty.VERY_HARD
        elif len(found) > 1:
            difficulty = Difficulty.HARD
        else:
            difficulty = Difficulty.EASY
        return FactorAnalysis(detected=True, difficulty=difficulty, matches=found)

    def _motion_requirements(self, text: str) -> FactorAnalysis:
        found = _found(text, PRECISE_MOTION_KEYWORDS)
        if not found:
            return FactorAnalysis(detected=False)

        difficulty = Difficulty.VERY_HARD if len(found) > 1 else Difficulty.HARD
        return FactorAnalysis(detected=True, difficulty=difficulty, matches=found)

    def _recommendations(
        self,
        original: str,
        factors: ComplexityFactors,
        category: ComplexityCategory,
    ) -> ComplexityRecommendations:
        simplified: str | None = None
        approach: AlternativeApproach | None = None

        if category in (ComplexityCategory.COMPLEX, ComplexityCategory.IMPOSSIBLE):
            simplified = self.simplify(original, factors)
            if factors.specific_action.difficulty == Difficulty.VERY_HARD:
                approach = AlternativeApproach.STOCK_FOOTAGE
            elif factors.material_properties.difficulty == Difficulty.VERY_HARD:
                approach = AlternativeApproach.REFERENCE_IMAGE

        lower = original.lower()
        best: tuple[str, ...] = ()
        avoid: tuple[str, ...] = ()
        for keywords, rule_best, rule_avoid in SUBJECT_RULES:
            if any(k in lower for k in keywords):
                best = rule_best
                if rule_avoid is not None:
                    avoid = rule_avoid

        return ComplexityRecommendations(
            best_providers=best,
            avoid_providers=avoid,
            simplified_prompt=simplified,
            alternative_approach=approach,
        )

    @staticmethod
    def simplify(original: str, factors: ComplexityFactors) -> str:
        """Strip detected material terms and all precise-motion terms."""
        simplified = original
        for term in (*factors.material_properties.matches, *PRECISE_MOTION_KEYWORDS):
            simplified = re.sub(re.escape(term), "", simplified, flags=re.IGNORECASE).strip()

        simplified = re.sub(r"\s+", " ", simplified)
        simplified = re.sub(r",\s*,", ",", simplified)
        simplified = re.sub(r"\s+,", ",", simplified).strip()
        simplified = re.sub(r"^,\s*", "", simplified)
        simplified = re.sub(r",\s*$", "", simplified)
        return simplified or original

    @staticmethod
    def _warning(category: ComplexityCategory, factors: ComplexityFactors) -> str | None:
        if category == ComplexityCategory.IMPOSSIBLE:
            return IMPOSSIBLE_WARNING

        if category == ComplexityCategory.COMPLEX:
            issues = []
            if factors.specific_action.difficulty == Difficulty.VERY_HARD:
                issues.append("specific hand/body actions")
            if factors.material_properties.difficulty == Difficulty.VERY_HARD:
                issues.append("material properties (translucent, liquid, etc.)")
            if factors.motion_requirements.difficulty == Difficulty.VERY_HARD:
                issues.append("precise motion direction")
            if issues:
                return (
                    f"This prompt has complex requirements ({', '.join(issues)}) that AI "
                    "video models struggle with. Results may not match expectations. "
                    "Consider simplifying or using a reference image."
                )

        return None
