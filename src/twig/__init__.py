"""Recent git branch picker.

Features:
- List local or remote branches, most recently committed first
- Scroll through them in a 10-row page with j/k or the arrow keys
- Narrow the list with a case-insensitive filter
- Check out the picked branch, creating a tracking branch for remotes
"""

__version__ = "0.1.0"
