"""
batchcall: sender-context batched call forwarding with a differential
equivalence harness.
"""
