class InvalidAddressError(ValueError):
    """Raised when a process id or virtual page number is outside the tables."""


class PageTableEntry:
    def __init__(self, virtual_page_num):
        self.virtual_page_num = virtual_page_num
        self.valid = False
        self.frame = None  # Physical frame index, only meaningful when valid

    def is_valid(self):
        return self.valid

    def map_to(self, frame_num):
        self.frame = frame_num
        self.valid = True

    def invalidate(self):
        self.valid = False
        self.frame = None


class PageTable:
    def __init__(self, process_id, num_pages=128):
        self.process_id = process_id
        self.num_pages = num_pages
        self.entries = [PageTableEntry(i) for i in range(num_pages)]

    def get_entry(self, virtual_page_num):
        if not 0 <= virtual_page_num < self.num_pages:
            raise InvalidAddressError(
                f"Virtual page {virtual_page_num} out of range for process "
                f"{self.process_id} (0-{self.num_pages - 1})")
        return self.entries[virtual_page_num]

    def translate(self, virtual_page_num):
        """Return the frame backing the page, or None if it is not mapped."""
        entry = self.get_entry(virtual_page_num)
        if entry.is_valid():
            return entry.frame
        return None

    def valid_entries(self):
        return [entry for entry in self.entries if entry.is_valid()]
