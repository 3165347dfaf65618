"""pmfcore - deterministic decision and scoring core for product-market-fit validation.

Four pure components over in-memory records:
- signals: metric derivation and rule-based signal classification
- gates: experiment gates, criteria matching and GO/FIX/KILL recommendation
- uncertainty: ranking of unresolved foundation risks
- scoring: the 0-100 PMF score and verdict
"""

__version__ = "0.1.0"
