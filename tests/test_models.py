"""Tests for parts, machines and buffers."""

import math
import unittest

from jobshopsim.core.exceptions import (
    ConfigurationError, NoPartToCompleteError, NotAvailableError, StateViolation
)
from jobshopsim.models.buffer import Buffer
from jobshopsim.models.machine import Machine, MachineState
from jobshopsim.models.part import Part, PartState
from jobshopsim.scheduling.dispatching_rules import FIFORule, PriorityRule


class TestPart(unittest.TestCase):
    """Test cases for Part."""

    def test_part_initialization(self):
        part = Part("P001", [1, 2, 3], arrival_time=5.0)

        self.assertEqual(part.part_id, "P001")
        self.assertEqual(part.arrival_time, 5.0)
        self.assertEqual(part.current_step, 0)
        self.assertEqual(part.state, PartState.IN_STORAGE)
        self.assertEqual(part.current_machine_id(), 1)
        self.assertEqual(part.next_machine_id(), 2)
        self.assertEqual(part.due_date, math.inf)

    def test_empty_route_rejected(self):
        with self.assertRaises(ConfigurationError):
            Part("P001", [])

    def test_route_progress(self):
        """Test advancing through the route."""
        part = Part("P001", [1, 2])

        part.advance()
        self.assertEqual(part.current_machine_id(), 2)
        self.assertIsNone(part.next_machine_id())
        self.assertTrue(part.has_more_operations())

        part.advance()
        self.assertIsNone(part.current_machine_id())
        self.assertFalse(part.has_more_operations())

        with self.assertRaises(StateViolation):
            part.advance()

    def test_repr_of_completed_part(self):
        part = Part("P001", [1, 2])
        self.assertEqual(repr(part), "Part(id=P001, op=1/2, state=in_storage)")

        part.advance()
        part.advance()
        part.mark_completed(4.0)
        self.assertEqual(repr(part), "Part(id=P001, op=2/2, state=completed)")

    def test_due_date_measures(self):
        part = Part("P001", [1, 2, 3], due_date=20.0, estimated_processing_time=2.0)

        self.assertEqual(part.estimated_remaining_time(), 6.0)
        self.assertAlmostEqual(part.critical_ratio(8.0), 2.0)
        self.assertAlmostEqual(part.slack(8.0), 6.0)

        # No work left: never the most critical
        part.current_step = 3
        self.assertEqual(part.critical_ratio(8.0), math.inf)

    def test_flow_time(self):
        part = Part("P001", [1], arrival_time=2.0)
        self.assertIsNone(part.flow_time)

        part.mark_completed(9.5)
        self.assertEqual(part.state, PartState.COMPLETED)
        self.assertEqual(part.flow_time, 7.5)


class TestMachine(unittest.TestCase):
    """Test cases for Machine."""

    def setUp(self):
        """Set up test fixtures."""
        self.machine = Machine(1, "Drill Press")
        self.part = Part("P001", [1, 2])

    def test_machine_initialization(self):
        self.assertEqual(self.machine.state, MachineState.IDLE)
        self.assertTrue(self.machine.is_available())
        self.assertIsNone(self.machine.current_part)
        self.assertIsInstance(self.machine.dispatching_rule, FIFORule)

    def test_start_and_complete(self):
        """Test a full processing cycle."""
        self.machine.start_processing(self.part, 0.0, 3.0)

        self.assertEqual(self.machine.state, MachineState.BUSY)
        self.assertFalse(self.machine.is_available())
        self.assertEqual(self.part.state, PartState.PROCESSING)
        self.assertEqual(self.machine.processing_end_time, 3.0)
        self.assertAlmostEqual(self.machine.processing_progress(1.5), 0.5)

        done = self.machine.complete_processing(3.0)

        self.assertIs(done, self.part)
        self.assertEqual(self.part.current_step, 1)
        self.assertEqual(self.machine.state, MachineState.IDLE)
        self.assertEqual(self.machine.parts_completed, 1)
        self.assertEqual(self.part.operation_history, [(1, 0.0, 3.0)])

    def test_start_when_busy_raises(self):
        self.machine.start_processing(self.part, 0.0, 3.0)
        with self.assertRaises(NotAvailableError):
            self.machine.start_processing(Part("P002", [1]), 1.0, 3.0)

    def test_complete_without_part_raises(self):
        with self.assertRaises(NoPartToCompleteError):
            self.machine.complete_processing(1.0)

    def test_block_and_release(self):
        """Test blocking keeps the part until release."""
        self.machine.start_processing(self.part, 0.0, 2.0)
        self.machine.block(2, 2.0)

        self.assertEqual(self.machine.state, MachineState.BLOCKED)
        self.assertIs(self.machine.current_part, self.part)
        self.assertEqual(self.machine.blocked_since, 2.0)
        self.assertEqual(self.part.current_step, 0)

        with self.assertRaises(StateViolation):
            self.machine.complete_processing(2.5)

        self.machine.release(3.0)
        self.assertEqual(self.machine.state, MachineState.IDLE)
        self.assertIsNone(self.machine.current_part)
        self.assertIsNone(self.machine.blocked_since)
        self.assertEqual(self.part.current_step, 1)

    def test_release_when_not_blocked_raises(self):
        self.machine.start_processing(self.part, 0.0, 2.0)
        with self.assertRaises(StateViolation):
            self.machine.release(2.0)

    def test_starve_and_wake(self):
        self.machine.mark_starved()
        self.assertEqual(self.machine.state, MachineState.STARVED)
        self.assertFalse(self.machine.is_available())

        self.machine.wake()
        self.assertEqual(self.machine.state, MachineState.IDLE)

        self.machine.start_processing(self.part, 0.0, 1.0)
        with self.assertRaises(StateViolation):
            self.machine.mark_starved()

    def test_reset(self):
        self.machine.start_processing(self.part, 0.0, 2.0)
        self.machine.reset()

        self.assertEqual(self.machine.state, MachineState.IDLE)
        self.assertIsNone(self.machine.current_part)
        self.assertEqual(self.machine.parts_completed, 0)


class TestBuffer(unittest.TestCase):
    """Test cases for Buffer."""

    def setUp(self):
        """Set up test fixtures."""
        self.buffer = Buffer(2, machine_id=1)

    def test_invalid_capacity(self):
        for capacity in (0, -1, 1.5, True):
            with self.assertRaises(ConfigurationError):
                Buffer(capacity, machine_id=1)

    def test_add_until_full(self):
        """Test capacity is enforced without raising."""
        p1, p2, p3 = Part("P001", [1]), Part("P002", [1]), Part("P003", [1])

        self.assertTrue(self.buffer.try_add(p1, 0.0))
        self.assertTrue(self.buffer.try_add(p2, 1.0))
        self.assertTrue(self.buffer.is_full)
        self.assertFalse(self.buffer.try_add(p3, 2.0))

        self.assertEqual(len(self.buffer), 2)
        self.assertEqual(p1.state, PartState.IN_BUFFER)
        self.assertEqual(p2.buffer_entry_time, 1.0)
        self.assertEqual(p3.state, PartState.IN_STORAGE)
        self.assertEqual(self.buffer.utilization, 1.0)

    def test_fifo_removal(self):
        p1, p2 = Part("P001", [1]), Part("P002", [1])
        self.buffer.try_add(p1, 0.0)
        self.buffer.try_add(p2, 0.0)

        self.assertIs(self.buffer.peek(), p1)
        self.assertIs(self.buffer.try_remove(), p1)
        self.assertIs(self.buffer.try_remove(), p2)
        self.assertIsNone(self.buffer.try_remove())
        self.assertTrue(self.buffer.is_empty)

    def test_select_and_remove_keeps_order(self):
        """Test rule-based removal leaves remaining parts in enqueue order."""
        buffer = Buffer(3, machine_id=1)
        parts = [Part("P001", [1], priority=1), Part("P002", [1], priority=5), Part("P003", [1], priority=2)]
        for part in parts:
            buffer.try_add(part, 0.0)

        chosen = buffer.select_and_remove(PriorityRule(), 1.0)

        self.assertIs(chosen, parts[1])
        self.assertEqual([p.part_id for p in buffer], ["P001", "P003"])
        self.assertIsNone(Buffer(1, machine_id=2).select_and_remove(PriorityRule(), 1.0))

    def test_clear(self):
        self.buffer.try_add(Part("P001", [1]), 0.0)
        self.buffer.clear()
        self.assertTrue(self.buffer.is_empty)


if __name__ == '__main__':
    unittest.main()
