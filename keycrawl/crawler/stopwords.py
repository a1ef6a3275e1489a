"""English function words ignored by the local keyword extractor."""

from __future__ import annotations

DEFAULT_STOPWORDS: frozenset[str] = frozenset(
    """
    i me my myself we our ours ourselves you your yours yourself yourselves
    he him his himself she her hers herself it its itself they them their
    theirs themselves what which who whom whose this that these those am is
    are was were be been being have has had having do does did doing a an
    the and but if or because as until while of at by for with about against
    between into through during before after above below to from up down in
    out on off over under again further then once here there when where why
    how all any both each few more most other some such no nor not only own
    same so than too very s t can will just don should now also get like use
    would could shall might must may ought upon onto within without across
    along around among behind beyond toward towards via yet still even ever
    every much many another whether either neither else etc one two new
    make made using used well back way per
    """.split()
)
