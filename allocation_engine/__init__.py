"""Portfolio target-allocation engine.

Keeps asset-class and asset targets consistent as they are edited, and
derives current totals, target values, deltas and buy/sell/hold actions.
"""
