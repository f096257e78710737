"""
Proof generation tests: only verified executions are proved
"""
import pytest

from zkarena.errors import ArenaError, ProvingBackendError, UnverifiedInputError
from zkarena.game import connect4
from zkarena.inputs import assemble_inputs
from zkarena.proving import ProofGenerator, ProofSet
from zkarena.verifier import ExecutionVerifier


@pytest.fixture
def verified_set(backend, column_programs, metadata, column_record):
    verifier = ExecutionVerifier(backend, connect4.RULES)
    return verifier.verify_all(column_programs, assemble_inputs(metadata, column_record), column_record)


class TestProofGenerator:
    def test_rejects_unverified_input(self, backend, cache, metadata, column_record):
        prover = ProofGenerator(backend, cache)
        inputs = assemble_inputs(metadata, column_record)
        with pytest.raises(UnverifiedInputError):
            prover.prove(inputs.game)
        assert len(cache) == 0

    def test_unverified_error_types(self):
        assert issubclass(UnverifiedInputError, ArenaError)
        assert issubclass(UnverifiedInputError, TypeError)

    def test_prove_all(self, backend, cache, verified_set):
        prover = ProofGenerator(backend, cache)
        proofs = prover.prove_all(verified_set)
        assert isinstance(proofs, ProofSet)
        assert set(proofs.key_pairs) == {"game", "agent0", "agent1"}
        for proof, verified in zip(proofs, verified_set):
            assert proof.public_values == verified.receipt.public_values
            assert proof.program_id == verified.program.program_id
            assert prover.verify_proof(proof, proofs.key_pairs[verified.target.value])

    def test_key_pairs_reused_across_matches(self, backend, cache, verified_set):
        prover = ProofGenerator(backend, cache)
        prover.prove_all(verified_set)
        prover.prove_all(verified_set)
        for verified in verified_set:
            assert cache.derivations[verified.program.program_id] == 1

    def test_proof_does_not_verify_under_other_key(self, backend, cache, verified_set):
        prover = ProofGenerator(backend, cache)
        proofs = prover.prove_all(verified_set)
        assert not prover.verify_proof(proofs.game, proofs.key_pairs["agent0"])

    def test_backend_failure_wrapped(self, cache, verified_set):
        class BrokenBackend:
            def prove(self, program, key_pair, stdin):
                raise MemoryError("prover ran out of memory")

        prover = ProofGenerator(BrokenBackend(), cache)
        with pytest.raises(ProvingBackendError) as exc_info:
            prover.prove_all(verified_set)
        assert exc_info.value.operation == "prove"
        assert isinstance(exc_info.value.__cause__, MemoryError)

    def test_proved_output_must_match_verified_output(self, backend, cache, verified_set):
        class DriftingBackend:
            def prove(self, program, key_pair, stdin):
                proof = backend.prove(program, key_pair, stdin)
                return type(proof)(proof.program_id, proof.vk_hash, b"drift", proof.proof_bytes)

        prover = ProofGenerator(DriftingBackend(), cache)
        with pytest.raises(ProvingBackendError):
            prover.prove(verified_set.game)
