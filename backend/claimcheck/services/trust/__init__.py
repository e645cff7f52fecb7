# Trust Layer Services
#
# Everything that decides whether a passage can be trusted:
# - What claims were made (ClaimExtractor)
# - What to look up for each claim (EntityExtractor)
# - Whether a source supports the claim (SemanticMatcher)
# - The per-claim verdict (ClaimVerifier)
# - The passage-level score and label (TrustScorer)
