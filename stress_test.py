"""
Stress tests / adversarial evaluation of treeshift.

This script attempts to BREAK the claimed properties:
  1. Path transforms track nodes through real tree mutation
  2. Point transforms keep the character after the point
  3. String-diff normalization preserves the edit's effect
  4. Merging two diffs equals applying them in sequence
  5. Pending diffs rebased through text edits still apply cleanly
"""

import sys, os, random, time
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from treeshift import path as paths
from treeshift import point as points
from treeshift.errors import InvalidNodeError
from treeshift.operations import (
    Affinity,
    InsertNode, RemoveNode, MergeNode, SplitNode, MoveNode,
    InsertText, RemoveText,
)
from treeshift.pending import transform_text_diff
from treeshift.point import Point
from treeshift.string_diff import (
    StringDiff, TextDiff, apply_string_diff, merge_string_diffs, normalize_string_diff,
)
from treeshift.tree import Document, Element, Text, apply_operation, get_node, has_path, nodes


def test(name, condition, detail=""):
    status = "PASS" if condition else "FAIL"
    print(f"  [{status}] {name}" + (f"  ({detail})" if detail else ""))
    return condition


_counter = 0

def fresh_text():
    """A leaf whose text appears nowhere else in the document."""
    global _counter
    _counter += 1
    return Text(f"<{_counter}>")


def random_tree(max_depth=3):
    def element(depth):
        children = []
        for _ in range(random.randint(1, 3)):
            if depth < max_depth and random.random() < 0.3:
                children.append(element(depth + 1))
            else:
                children.append(fresh_text())
        return Element(tuple(children))
    return Document(tuple(element(1) for _ in range(random.randint(1, 4))))


def random_operation(root):
    """Pick an operation that is valid on `root`, or None."""
    all_paths = [p for _, p in nodes(root) if p]
    kind = random.choice(["insert", "remove", "merge", "split", "move"])
    target = random.choice(all_paths)
    node = get_node(root, target)

    if kind == "insert":
        parent = get_node(root, paths.parent(target))
        index = random.randint(0, len(parent.children))
        return InsertNode(paths.parent(target) + (index,), fresh_text())

    if kind == "remove":
        return RemoveNode(target, node)

    if kind == "merge":
        if not paths.has_previous(target):
            return None
        prev = get_node(root, paths.previous(target))
        if type(prev) is not type(node):
            return None
        position = len(prev.text) if isinstance(prev, Text) else len(prev.children)
        return MergeNode(target, position)

    if kind == "split":
        size = len(node.text) if isinstance(node, Text) else len(node.children)
        return SplitNode(target, random.randint(0, size))

    destinations = [p for p in all_paths
                    if not paths.equals(p, target) and not paths.is_descendant(p, target)]
    if not destinations:
        return None
    return MoveNode(target, random.choice(destinations))


# ═══════════════════════════════════════════════════════════════
#  §1  PATH TRANSFORMS vs REAL MUTATION
# ═══════════════════════════════════════════════════════════════

print("=" * 70)
print("  §1  PATH TRANSFORMS vs apply_operation")
print("=" * 70)

random.seed(42)
checked = 0
mismatches = 0
skipped = 0
t0 = time.perf_counter()

for _ in range(3000):
    root = random_tree()
    op = random_operation(root)
    if op is None:
        skipped += 1
        continue
    try:
        new_root = apply_operation(root, op)
    except InvalidNodeError:
        skipped += 1
        continue

    for node, p in nodes(root):
        if not isinstance(node, Text):
            continue
        checked += 1
        new_path = paths.transform(p, op)

        if new_path is None:
            ok = isinstance(op, RemoveNode) and (
                paths.equals(p, op.path) or paths.is_ancestor(op.path, p))
        elif not has_path(new_root, new_path):
            ok = False
        else:
            found = get_node(new_root, new_path)
            # merge/split on the leaf itself change its text
            ok = isinstance(found, Text) and (node.text in found.text or found.text in node.text)

        if not ok:
            mismatches += 1
            if mismatches <= 5:
                print(f"    MISMATCH: {p} through {op} → {new_path}")

dt = time.perf_counter() - t0
test(f"Leaves tracked through random operations ({checked} leaves, {dt:.2f}s)",
     mismatches == 0,
     f"{mismatches} mismatches, {skipped} skipped")


# ═══════════════════════════════════════════════════════════════
#  §2  POINT TRANSFORMS THROUGH TEXT EDITS
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §2  POINTS THROUGH TEXT EDITS")
print("=" * 70)

random.seed(7)
alphabet = "abcdefghij"
lost = 0
for _ in range(2000):
    text = "".join(random.choice(alphabet) for _ in range(random.randint(1, 12)))
    # sentinel marks the character after the point
    offset = random.randint(0, len(text))
    marked = text[:offset] + "|" + text[offset:]
    root = Document((Element((Text(marked),)),))

    at = random.randint(0, len(marked))
    if random.random() < 0.5:
        op = InsertText((0, 0), at, "xyz")
    else:
        at = min(at, offset + 1)
        length = random.randint(0, max(0, offset - at))
        op = RemoveText((0, 0), at, marked[at:at + length])

    p = points.transform(Point((0, 0), offset), op, affinity=Affinity.BACKWARD)
    leaf = get_node(apply_operation(root, op), (0, 0))
    if p is None or leaf.text[p.offset:p.offset + 1] != "|":
        lost += 1

test("Character after the point is preserved (2000 edits)", lost == 0, f"{lost} lost")


# ═══════════════════════════════════════════════════════════════
#  §3  NORMALIZATION LAW
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §3  NORMALIZE — same effect, idempotent")
print("=" * 70)


def random_diff(text):
    start = random.randint(0, len(text))
    end = random.randint(start, len(text))
    replacement = "".join(random.choice("abc") for _ in range(random.randint(0, 4)))
    return StringDiff(start, end, replacement)


random.seed(99)
effect_failures = 0
idempotence_failures = 0
for _ in range(5000):
    text = "".join(random.choice("abc") for _ in range(random.randint(0, 8)))
    diff = random_diff(text)
    normalized = normalize_string_diff(text, diff)
    expected = apply_string_diff(text, diff)
    if normalized is None:
        if expected != text:
            effect_failures += 1
        continue
    if apply_string_diff(text, normalized) != expected:
        effect_failures += 1
    if normalize_string_diff(text, normalized) != normalized:
        idempotence_failures += 1

test("apply(normalize(d)) == apply(d) (5000 diffs)", effect_failures == 0,
     f"{effect_failures} failures")
test("normalize is idempotent", idempotence_failures == 0,
     f"{idempotence_failures} failures")


# ═══════════════════════════════════════════════════════════════
#  §4  MERGE LAW
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §4  MERGE — equals sequential application")
print("=" * 70)

random.seed(2024)
merge_failures = 0
for _ in range(5000):
    text = "".join(random.choice("abc") for _ in range(random.randint(0, 8)))
    a = random_diff(text)
    b = random_diff(apply_string_diff(text, a))
    merged = merge_string_diffs(text, a, b)
    expected = apply_string_diff(text, a, b)
    actual = text if merged is None else apply_string_diff(text, merged)
    if actual != expected:
        merge_failures += 1
        if merge_failures <= 5:
            print(f"    MISMATCH: {text!r} {a} then {b} → {merged}")

test("apply(merge(a, b)) == apply(apply(a), b) (5000 pairs)", merge_failures == 0,
     f"{merge_failures} failures")


# ═══════════════════════════════════════════════════════════════
#  §5  PENDING DIFFS THROUGH DISJOINT TEXT EDITS
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §5  PENDING DIFFS — edits outside the diff commute")
print("=" * 70)

random.seed(5)
commute_failures = 0
for _ in range(3000):
    text = "".join(random.choice(alphabet) for _ in range(random.randint(2, 12)))
    diff = random_diff(text)
    text_diff = TextDiff(0, (0, 0), diff)

    # an edit entirely before or entirely after the diff's span
    if random.random() < 0.5 and diff.start > 0:
        at = random.randint(0, diff.start)
        op = RemoveText((0, 0), at, text[at:diff.start])
    else:
        at = random.choice([random.randint(0, diff.start), random.randint(diff.end, len(text))])
        op = InsertText((0, 0), at, "QQ")

    committed = get_node(apply_operation(Document((Element((Text(text),)),)), op), (0, 0)).text
    rebased = transform_text_diff(text_diff, op)
    # the user's edit applied after the committed one
    expected = apply_string_diff(text, diff)
    if isinstance(op, InsertText) and op.offset <= diff.start:
        expected = expected[:at] + "QQ" + expected[at:]
    elif isinstance(op, InsertText):
        shifted = at - diff.end + diff.start + len(diff.text)
        expected = expected[:shifted] + "QQ" + expected[shifted:]
    else:
        expected = expected[:at] + expected[diff.start:]
    if apply_string_diff(committed, rebased.diff) != expected:
        commute_failures += 1
        if commute_failures <= 5:
            print(f"    MISMATCH: {text!r} {diff} through {op} → {rebased.diff}")

test("Rebased pending diff reproduces the user's text (3000 edits)", commute_failures == 0,
     f"{commute_failures} failures")


# ═══════════════════════════════════════════════════════════════
#  SUMMARY
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  STRESS TEST SUMMARY")
print("=" * 70)
print("  If you see FAIL above, there's a bug.")
print("  If everything is PASS, the implementation is correct")
print("  for the tested cases (not a proof, but high confidence).")
