import subprocess

def check_graphviz_installed():
    try:
        subprocess.run(["dot", "-V"], check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False

def char_ranges(chars) -> str:
    """Compress a set of characters into a readable class, e.g. {'0',...,'9','_'} -> '0-9, _'."""
    codes = sorted(ord(c) for c in chars)
    parts, i = [], 0
    while i < len(codes):
        j = i
        while j + 1 < len(codes) and codes[j + 1] == codes[j] + 1:
            j += 1
        if j - i >= 2:
            parts.append(f"{printable(chr(codes[i]))}-{printable(chr(codes[j]))}")
        else:
            parts.extend(printable(chr(c)) for c in codes[i:j + 1])
        i = j + 1
    return ', '.join(parts)

def printable(c: str) -> str:
    """Escape whitespace and control characters for diagrams and diagnostics."""
    if c == ' ':
        return "' '"
    if c.isprintable():
        return c
    return repr(c)[1:-1]
