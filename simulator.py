import argparse
import re
import sys
from collections import namedtuple

from page_table import PageTable, InvalidAddressError
from memory_manager import PhysicalMemory, Statistics, NoVictimError, CorruptStateError

NUM_PROCESSES = 4
NUM_PAGES = 128  # Page table entries per process
NUM_FRAMES = 32
OFFSET_BITS = 9  # 512-byte pages
AGING_PERIOD = 200  # Clear all reference bits every this many accesses

READ = 'R'
WRITE = 'W'

# Victim priority, scanned in order over occupied frames: (referenced, dirty).
# Referenced-but-clean frames are only taken when no other tier matches.
EVICTION_TIERS = [
    (False, False),  # tier 1: unreferenced, clean
    (False, True),   # tier 2: unreferenced, dirty (write-back)
    (True, True),    # tier 3: referenced, dirty (write-back)
    (True, False),   # last resort: referenced, clean
]

Operation = namedtuple('Operation', ['process_id', 'page_num', 'access'])

# ASCII digits only
PID_RE = re.compile(r'[0-9]+')
ADDRESS_RE = re.compile(r'(0[xX])?[0-9a-fA-F]+')


class TraceFormatError(ValueError):
    def __init__(self, line_num, message):
        super().__init__(f"line {line_num}: {message}")
        self.line_num = line_num


def parse_operation(line, line_num=1, num_processes=NUM_PROCESSES,
                    num_pages=NUM_PAGES, offset_bits=OFFSET_BITS):
    """Decode one ``<pid> <hex address> <R|W>`` trace line.

    Returns None for blank lines. Raises TraceFormatError for anything the
    simulator must not see: bad field count, non-numeric values, an unknown
    access tag, or a process id / page outside the configured tables.
    """
    parts = line.split()
    if not parts:
        return None
    if len(parts) != 3:
        raise TraceFormatError(line_num, f"expected 3 fields, got {len(parts)}")

    if not PID_RE.fullmatch(parts[0]):
        raise TraceFormatError(line_num, f"bad process id {parts[0]!r}")
    if not ADDRESS_RE.fullmatch(parts[1]):
        raise TraceFormatError(line_num, f"bad address {parts[1]!r}")
    process_id = int(parts[0])
    address = int(parts[1], 16)

    access = parts[2]
    if access not in (READ, WRITE):
        raise TraceFormatError(line_num, f"unknown access type {access!r}")
    if not 0 <= process_id < num_processes:
        raise TraceFormatError(line_num, f"process id {process_id} out of range")

    page_num = address >> offset_bits
    if page_num >= num_pages:
        raise TraceFormatError(line_num, f"address {parts[1]} beyond page {num_pages - 1}")
    return Operation(process_id, page_num, access)


def read_trace(trace_file, num_processes=NUM_PROCESSES, num_pages=NUM_PAGES,
               offset_bits=OFFSET_BITS):
    for line_num, line in enumerate(trace_file, 1):
        op = parse_operation(line, line_num, num_processes, num_pages, offset_bits)
        if op is not None:
            yield op


class VirtualMemorySimulator:

    def __init__(self, num_processes=NUM_PROCESSES, num_pages=NUM_PAGES,
                 num_frames=NUM_FRAMES, offset_bits=OFFSET_BITS,
                 aging_period=AGING_PERIOD):
        for name, value in [('num_processes', num_processes), ('num_pages', num_pages),
                            ('num_frames', num_frames), ('offset_bits', offset_bits),
                            ('aging_period', aging_period)]:
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        self.num_processes = num_processes
        self.num_pages = num_pages
        self.offset_bits = offset_bits
        self.aging_period = aging_period
        self.physical_memory = PhysicalMemory(num_frames=num_frames)
        self.page_tables = [PageTable(pid, num_pages) for pid in range(num_processes)]
        self.stats = Statistics()

    def get_page_table(self, process_id):
        if not 0 <= process_id < self.num_processes:
            raise InvalidAddressError(
                f"Process id {process_id} out of range (0-{self.num_processes - 1})")
        return self.page_tables[process_id]

    def translate(self, process_id, page_num):
        return self.get_page_table(process_id).translate(page_num)

    def handle_operation(self, op):
        frame_num = self.translate(op.process_id, op.page_num)
        if frame_num is None:
            self.stats.record_page_fault()
            frame_num = self.handle_page_fault(op.process_id, op.page_num)

        frame = self.physical_memory.get_frame_info(frame_num)
        if op.access == WRITE:
            frame.dirty = True
        frame.referenced = True

        self.stats.record_access()
        if self.stats.memory_accesses % self.aging_period == 0:
            self.physical_memory.reset_reference_bits()
        return frame_num

    def handle_page_fault(self, process_id, page_num):
        entry = self.get_page_table(process_id).get_entry(page_num)

        frame_num = self.physical_memory.find_free_frame()
        if frame_num is None:
            frame_num = self.select_victim_page()

        self.physical_memory.allocate_frame(frame_num, process_id, page_num)
        # Load the page from disk
        self.stats.record_page_load()
        entry.map_to(frame_num)
        return frame_num

    def select_victim_page(self):
        for tier, (ref_bit, dirty_bit) in enumerate(EVICTION_TIERS, 1):
            for frame_num, frame in enumerate(self.physical_memory.frames):
                if frame.available:
                    continue
                if frame.referenced == ref_bit and frame.dirty == dirty_bit:
                    self.evict_page(frame_num, tier)
                    return frame_num

        raise NoVictimError(
            f"No occupied frame to evict among {self.physical_memory.num_frames} frames")

    def evict_page(self, frame_num, tier):
        frame = self.physical_memory.get_frame_info(frame_num)
        owner = frame.owner()
        if owner is None:
            raise CorruptStateError(f"Frame {frame_num} selected for eviction has no owner")

        proc_id, vpage_num = owner
        entry = self.get_page_table(proc_id).get_entry(vpage_num)
        if not entry.is_valid() or entry.frame != frame_num:
            raise CorruptStateError(
                f"Frame {frame_num} claims P{proc_id}:{vpage_num}, "
                f"but that entry maps to {entry.frame}")

        self.stats.record_eviction(tier, is_dirty=frame.dirty)
        entry.invalidate()
        self.physical_memory.free_frame(frame_num)

    def check_consistency(self):
        """Raise CorruptStateError unless page tables and frames agree both ways."""
        claimed = set()
        for page_table in self.page_tables:
            for entry in page_table.valid_entries():
                frame = self.physical_memory.get_frame_info(entry.frame)
                if frame.owner() != (page_table.process_id, entry.virtual_page_num):
                    raise CorruptStateError(
                        f"P{page_table.process_id}:{entry.virtual_page_num} maps to "
                        f"frame {entry.frame} owned by {frame.owner()}")
                claimed.add(entry.frame)

        for frame_num, frame in enumerate(self.physical_memory.frames):
            if not frame.available and frame_num not in claimed:
                raise CorruptStateError(f"Frame {frame_num} occupied but unmapped")

    def snapshot(self):
        pages = tuple(
            tuple((entry.valid, entry.frame) for entry in page_table.entries)
            for page_table in self.page_tables)
        frames = tuple(
            (f.available, f.dirty, f.referenced, f.process_id, f.page_num)
            for f in self.physical_memory.frames)
        return pages, frames

    def replay(self, operations):
        for op in operations:
            self.handle_operation(op)
        return self.stats

    def run_simulation(self, filename):
        with open(filename, 'r') as f:
            return self.replay(read_trace(f, self.num_processes, self.num_pages,
                                          self.offset_bits))


def build_parser():
    parser = argparse.ArgumentParser(
        description='Replay a memory trace against a demand-paged VM and report faults.')
    parser.add_argument('trace_file', help='Trace file, one "<pid> <hex address> <R|W>" per line')
    parser.add_argument('--processes', type=int, default=NUM_PROCESSES,
                        help='Number of process slots (default: %(default)s)')
    parser.add_argument('--pages', type=int, default=NUM_PAGES,
                        help='Page table entries per process (default: %(default)s)')
    parser.add_argument('--frames', type=int, default=NUM_FRAMES,
                        help='Physical frames (default: %(default)s)')
    parser.add_argument('--offset-bits', type=int, default=OFFSET_BITS,
                        help='Page offset width in bits (default: %(default)s)')
    parser.add_argument('--aging-period', type=int, default=AGING_PERIOD,
                        help='Accesses between reference bit sweeps (default: %(default)s)')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        simulator = VirtualMemorySimulator(
            num_processes=args.processes, num_pages=args.pages,
            num_frames=args.frames, offset_bits=args.offset_bits,
            aging_period=args.aging_period)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        stats = simulator.run_simulation(args.trace_file)
    except OSError as e:
        print(f"Invalid file: {e}", file=sys.stderr)
        return 1
    except (TraceFormatError, InvalidAddressError, UnicodeDecodeError) as e:
        print(f"Error while parsing file: {e}", file=sys.stderr)
        return 1
    except CorruptStateError as e:
        print(f"Fatal internal error: {e}", file=sys.stderr)
        return 2

    print(stats)
    return 0


if __name__ == '__main__':
    sys.exit(main())
