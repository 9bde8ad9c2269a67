"""Main memory of the XSM machine and its paging hardware."""

from .word import XSM_INSTRUCTION_SIZE, Word

XSM_PAGE_SIZE = 512
XSM_MEMORY_NUMPAGES = 128
XSM_MEMORY_SIZE = XSM_PAGE_SIZE * XSM_MEMORY_NUMPAGES

XSM_MEM_NOWRITE = -1
XSM_MEM_PAGEFAULT = -2
XSM_MEM_ILLPAGE = -3

_PRESENT = 1
_WRITABLE = 2
_ZERO = ord("0")


class TranslationError(Exception):
    """A logical address could not be translated to a physical one."""

    code = 0
    reason = "translation failed"

    def __init__(self, page):
        super().__init__(f"page {page}: {self.reason}")
        self.page = page


class IllegalPage(TranslationError):
    """The page lies outside the page table."""

    code = XSM_MEM_ILLPAGE
    reason = "illegal page"


class PageFault(TranslationError):
    """The page is not present in memory."""

    code = XSM_MEM_PAGEFAULT
    reason = "page fault"


class WriteProtected(TranslationError):
    """A write was attempted on a read-only page."""

    code = XSM_MEM_NOWRITE
    reason = "page is not writable"


def page_of(address):
    """Return the page holding *address*, or None for a negative address."""
    if address < 0:
        return None
    return address // XSM_PAGE_SIZE


class Memory:
    """The machine's RAM: a flat array of words."""

    def __init__(self):
        self._words = [Word() for _ in range(XSM_MEMORY_SIZE)]

    def is_address_valid(self, address):
        """Tell whether *address* is inside physical memory."""
        return 0 <= address < XSM_MEMORY_SIZE

    def word(self, address):
        """Return the word at physical *address*; IndexError when out of range."""
        if not self.is_address_valid(address):
            raise IndexError(f"memory address out of range: {address}")
        return self._words[address]

    def page(self, page):
        """Return the words of physical page *page*."""
        start = page * XSM_PAGE_SIZE
        if not (self.is_address_valid(start) and page >= 0):
            raise IndexError(f"no such page: {page}")
        return self._words[start:start + XSM_PAGE_SIZE]

    def translate_page(self, ptbr, ptlr, page, write):
        """Return the physical page for logical *page* through the page table."""
        if page is None or page < 0 or page >= ptlr:
            raise IllegalPage(page)
        entry_address = ptbr + page * 2
        entry = self.word(entry_address).get_integer()
        info = self.word(entry_address + 1).raw
        if info[_PRESENT] == _ZERO:
            raise PageFault(page)
        if write and info[_WRITABLE] == _ZERO:
            raise WriteProtected(page)
        return entry

    def translate_address(self, ptbr, ptlr, address, write):
        """Return the physical address for logical *address*."""
        page = page_of(address)
        target = self.translate_page(ptbr, ptlr, page, write)
        return target * XSM_PAGE_SIZE + address % XSM_PAGE_SIZE

    def raw_instruction(self, address):
        """Return the text of the instruction starting at physical *address*."""
        return "".join(
            self.word(address + offset).get_string()
            for offset in range(XSM_INSTRUCTION_SIZE)
        )