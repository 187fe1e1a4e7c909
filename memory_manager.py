class CorruptStateError(RuntimeError):
    """Page tables and frame records disagree; the run cannot continue."""


class NoVictimError(CorruptStateError):
    """Raised when eviction finds no candidate frame."""


class FrameRecord:
    def __init__(self):
        self.available = True
        self.dirty = False
        self.referenced = False
        # Owner (process_id, virtual_page_num); None while the frame is free
        self.process_id = None
        self.page_num = None

    def owner(self):
        if self.available:
            return None
        return (self.process_id, self.page_num)

    def __repr__(self):
        state = "F" if self.available else f"P{self.process_id}:{self.page_num}"
        return f"[{state}|R={int(self.referenced)}|D={int(self.dirty)}]"


class PhysicalMemory:
    def __init__(self, num_frames=32):
        self.num_frames = num_frames
        self.frames = [FrameRecord() for _ in range(num_frames)]

    def find_free_frame(self):
        for i, frame in enumerate(self.frames):
            if frame.available:
                return i
        return None

    def allocate_frame(self, frame_num, process_id, virtual_page_num):
        frame = self.frames[frame_num]
        frame.available = False
        frame.process_id = process_id
        frame.page_num = virtual_page_num
        frame.dirty = False

    def free_frame(self, frame_num):
        frame = self.frames[frame_num]
        frame.available = True
        frame.dirty = False
        frame.referenced = False
        frame.process_id = None
        frame.page_num = None

    def get_frame_info(self, frame_num):
        return self.frames[frame_num]

    def reset_reference_bits(self):
        for frame in self.frames:
            frame.referenced = False


class Statistics:
    def __init__(self):
        self.memory_accesses = 0
        self.page_faults = 0
        self.disk_accesses = 0
        self.dirty_writes = 0
        # Evictions by tier: 1 = unreferenced clean, 2 = unreferenced dirty,
        # 3 = referenced dirty, 4 = referenced clean
        self.evictions = {1: 0, 2: 0, 3: 0, 4: 0}

    def record_access(self):
        self.memory_accesses += 1

    def record_page_fault(self):
        self.page_faults += 1

    def record_page_load(self):
        self.disk_accesses += 1

    def record_eviction(self, tier, is_dirty):
        self.evictions[tier] += 1
        if is_dirty:
            # Write the victim back before its frame is reused
            self.disk_accesses += 1
            self.dirty_writes += 1

    def as_dict(self):
        return {
            'memory_accesses': self.memory_accesses,
            'page_faults': self.page_faults,
            'disk_accesses': self.disk_accesses,
            'dirty_writes': self.dirty_writes,
        }

    def __str__(self):
        return (f"Page accesses: {self.memory_accesses}\n"
                f"Page faults: {self.page_faults}\n"
                f"Disk accesses: {self.disk_accesses}")
