"""Models of machine parts: words, paged memory, registers, the disk image and exception state."""