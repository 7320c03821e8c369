"""
Nontransitive Dice Cycle Search (Efron-style quadruples)
========================================================
What this script does:
- Enumerates ALL distinct dice for a platonic solid: every multiset of
  N_FACES labels drawn from N_LABELS ordered labels.
- Each die is stored as a product of primes (one prime per face label), so
  permutations of the same faces collapse into the same integer.
- Computes the face-vs-face win counts for every ordered pair of dice with
  torch tensors (CUDA when available).
- Searches for cycles A > B > C > D > A where every die strictly beats the next
  and all four win:loss ratios are equal (odds-balanced).
- Each cycle is reported once; its three rotations are skipped.
Output:
  stdout: one block per cycle (#i, A:..D: faces, odds line, "(no ties)" marker)
  stderr: "# of dice: <n>" and, with -v, tagged progress lines
Usage:
  python nontransitive_dice.py # default search (6 faces, 7 labels)
  python nontransitive_dice.py -v # verbose progress on stderr
  python nontransitive_dice.py --device cpu # force CPU tensors
"""
import argparse
import sys
import time
from typing import Iterator, List, NamedTuple, Optional, Sequence, Set, TextIO, Tuple

import torch

# ----------------------------- Top-level configurable params -----------------------------
# platonic solid: {4, 6, 8, 12, 20}
N_FACES = 6
N_LABELS = 7

DEVICE = torch.device("cuda" if torch.cuda.is_available() else "cpu")
ROW_CHUNK_SIZE = 64 # odds-matrix rows per tensor batch
PAIR_CHUNK_SIZE = 4096 # (b, c) candidate pairs per tensor batch
PRINT_EVERY = 50 # verbose progress every N values of a
# -----------------------------------------------------------------------------------------

PLATONIC_FACES = (4, 6, 8, 12, 20)
PRIMES = (
    2, 3, 5, 7, 11, 13, 17, 19, 23, 29,
    31, 37, 41, 43, 47, 53, 59, 61, 67, 71,
)
QUAD_LANE = 0x10000


def check_config(faces: int = N_FACES, labels: int = N_LABELS) -> None:
    if faces <= 0 or labels <= 0:
        raise ValueError(f"faces and labels must be positive, got faces={faces} labels={labels}")
    if faces not in PLATONIC_FACES:
        raise ValueError(f"faces={faces} is not a platonic solid; choose one of {PLATONIC_FACES}")
    if labels > len(PRIMES):
        raise ValueError(f"labels={labels} must be small enough for the prime table ({len(PRIMES)} primes)")


check_config()


# ----------------------------- dice generation & decoding --------------------------------
def add_face(dice: Set[int], labels: int = N_LABELS) -> Set[int]:
    return {n * PRIMES[i] for n in dice for i in range(labels)}


def generate_dice(faces: int = N_FACES, labels: int = N_LABELS) -> Set[int]:
    """All distinct dice as prime products; equal multisets give equal products."""
    check_config(faces, labels)
    dice = {1}
    for _ in range(faces):
        dice = add_face(dice, labels)
    return dice


def encode_die(die: Sequence[int], labels: int = N_LABELS) -> int:
    n = 1
    for label in die:
        if not 0 <= label < labels:
            raise ValueError(f"label {label} out of range [0, {labels})")
        n *= PRIMES[label]
    return n


def decode_die(n: int, faces: int = N_FACES, labels: int = N_LABELS) -> List[int]:
    die: List[int] = []
    remaining = n
    i = 0
    while i < labels and remaining != 1 and len(die) < faces:
        quot, rem = divmod(remaining, PRIMES[i])
        if rem == 0:
            die.append(i)
            remaining = quot
            # same label may repeat: rescan from the smallest prime
            i = 0
        else:
            i += 1
    assert len(die) == faces, f"decoded {len(die)} faces from {n}, expected {faces}"
    assert remaining == 1, f"{n} is not a product of the first {labels} primes"
    return die


def build_universe(faces: int = N_FACES, labels: int = N_LABELS) -> List[List[int]]:
    return [decode_die(n, faces, labels) for n in sorted(generate_dice(faces, labels))]


# ----------------------------- odds -------------------------------------------------------
def odds(d1: Sequence[int], d2: Sequence[int]) -> Tuple[int, int]:
    n1 = n2 = 0
    for x in d1:
        for y in d2:
            if x < y:
                n2 += 1
            elif x > y:
                n1 += 1
    return n1, n2


def build_odds_matrix(dice: torch.Tensor, row_chunk_size: int = ROW_CHUNK_SIZE) -> torch.Tensor:
    """
    Win counts for every ordered pair of dice.

    Args:
        dice: (n, F) integer tensor of face labels
        row_chunk_size: rows compared per batch; bounds the (chunk, n, F, F) tensor

    Returns:
        (n, n) int64 tensor W with W[i, j] = faces comparisons die i wins
        against die j, so odds(i, j) == (W[i, j], W[j, i]).
    """
    n, f = dice.shape
    wins = torch.zeros((n, n), dtype=torch.int64, device=dice.device)
    cols = dice.reshape(1, n, 1, f)
    for start in range(0, n, row_chunk_size):
        rows = dice[start:start + row_chunk_size].reshape(-1, 1, f, 1)
        wins[start:start + rows.shape[0]] = (rows > cols).sum(dim=(2, 3))
    return wins


def ratio_keys(wins: torch.Tensor) -> torch.Tensor:
    """
    Reduced win:loss fraction per strictly-beating edge, packed into one integer.

    Two edges get the same key exactly when their cross-multiplied odds are
    equal. Entries that are not an edge (tie, shutout, loss) are -1.
    """
    losses = wins.t()
    is_edge = (wins > 0) & (losses > 0) & (wins > losses)
    g = torch.gcd(wins, losses).clamp(min=1)
    base = int(wins.max().item()) + 1
    keys = (wins // g) * base + (losses // g)
    return torch.where(is_edge, keys, torch.full_like(keys, -1))


# ----------------------------- cycle checks -----------------------------------------------
class Cycle(NamedTuple):
    a: int
    b: int
    c: int
    d: int
    w1: Tuple[int, int, int, int]
    w2: Tuple[int, int, int, int]


def quadruple(a: int, b: int, c: int, d: int) -> int:
    assert 0 <= a < QUAD_LANE
    assert 0 <= b < QUAD_LANE
    assert 0 <= c < QUAD_LANE
    assert 0 <= d < QUAD_LANE
    return (a << 48) | (b << 32) | (c << 16) | d


def rotations(a: int, b: int, c: int, d: int) -> List[Tuple[int, int, int, int]]:
    return [(a, b, c, d), (b, c, d, a), (c, d, a, b), (d, a, b, c)]


def strictly_beats(w1: int, w2: int) -> bool:
    return w1 > 0 and w2 > 0 and w1 > w2


def same_ratio(w1a: int, w2a: int, w1b: int, w2b: int) -> bool:
    return w1a * w2b == w1b * w2a


def check_cycle(wins: List[List[int]], a: int, b: int, c: int, d: int) -> Optional[Cycle]:
    """Re-verify a candidate on plain ints: distinct, four strict beats, four ratio checks."""
    if len({a, b, c, d}) != 4:
        return None
    edges = [(a, b), (b, c), (c, d), (d, a)]
    w1 = tuple(wins[x][y] for x, y in edges)
    w2 = tuple(wins[y][x] for x, y in edges)
    for i in range(4):
        if not strictly_beats(w1[i], w2[i]):
            return None
    for i in range(4):
        j = (i + 1) % 4
        if not same_ratio(w1[i], w2[i], w1[j], w2[j]):
            return None
    return Cycle(a, b, c, d, w1, w2)


# ----------------------------- top-level search -----------------------------------------
def find_cycles(wins: torch.Tensor,
                pair_chunk_size: int = PAIR_CHUNK_SIZE,
                verbose: bool = False,
                log: Optional[TextIO] = None) -> Iterator[Cycle]:
    """
    Yield every odds-balanced 4-cycle once, in (a, b, c, d) lexicographic order.

    Per a: keep b where a beats b, then all (b, c) pairs where b beats c at the
    same ratio, then per chunk of pairs all d beating a at that ratio with
    c beating d at that ratio. Survivors are re-checked with check_cycle and
    rotations already reported are skipped.
    """
    log = log or sys.stderr
    n = wins.shape[0]
    keys = ratio_keys(wins)
    wins_list = wins.tolist()
    found: Set[int] = set()
    reported = 0
    t0 = time.time()
    if verbose:
        print(f"[SEARCH] dice={n} edges={int((keys >= 0).sum().item())} device={wins.device}", file=log)

    for a in range(n):
        if verbose and a % PRINT_EVERY == 0:
            print(f"[PROG] a={a}/{n} found={reported} dt={time.time() - t0:.2f}s", file=log)
        bs = (keys[a] >= 0).nonzero(as_tuple=True)[0]
        into_a = keys[:, a]
        ds = (into_a >= 0).nonzero(as_tuple=True)[0]
        if bs.numel() == 0 or ds.numel() == 0:
            continue
        kb = keys[a, bs]
        bc = (keys[bs] == kb.unsqueeze(1)).nonzero()
        if bc.numel() == 0:
            continue
        pair_b = bs[bc[:, 0]]
        pair_c = bc[:, 1]
        pair_k = kb[bc[:, 0]]
        k_into_a = into_a[ds].unsqueeze(0)
        ds_list = ds.tolist()

        for start in range(0, pair_b.numel(), pair_chunk_size):
            cb = pair_b[start:start + pair_chunk_size]
            cc = pair_c[start:start + pair_chunk_size]
            ck = pair_k[start:start + pair_chunk_size].unsqueeze(1)
            mask = (keys[cc.unsqueeze(1), ds.unsqueeze(0)] == ck) & (k_into_a == ck)
            hits = mask.nonzero().tolist()
            if not hits:
                continue
            cb_list = cb.tolist()
            cc_list = cc.tolist()
            for row, col in hits:
                b, c, d = cb_list[row], cc_list[row], ds_list[col]
                cycle = check_cycle(wins_list, a, b, c, d)
                if cycle is None:
                    continue
                q = quadruple(a, b, c, d)
                if q in found:
                    continue
                for rot in rotations(a, b, c, d):
                    found.add(quadruple(*rot))
                reported += 1
                yield cycle

    if verbose:
        print(f"[SEARCH-END] cycles={reported} dt={time.time() - t0:.2f}s", file=log)


# ----------------------------- reporting -------------------------------------------------
def format_die(name: str, die: Sequence[int]) -> str:
    return f"{name}:" + "".join(f" {v}" for v in die)


def no_ties(cycle: Cycle, faces: int) -> bool:
    return all(x + y == faces * faces for x, y in zip(cycle.w1, cycle.w2))


def format_found(index: int, dice: Sequence[Sequence[int]], cycle: Cycle) -> List[str]:
    faces = len(dice[cycle.a])
    lines = [f"#{index}"]
    for name, idx in zip("ABCD", (cycle.a, cycle.b, cycle.c, cycle.d)):
        lines.append(format_die(name, dice[idx]))
    line = "odds: " + ", ".join(f"{x}:{y}" for x, y in zip(cycle.w1, cycle.w2))
    if no_ties(cycle, faces):
        line += " (no ties)"
    lines.append(line)
    return lines


def print_found(index: int, dice: Sequence[Sequence[int]], cycle: Cycle, out: Optional[TextIO] = None) -> None:
    print("\n".join(format_found(index, dice, cycle)), file=out or sys.stdout, flush=True)


# ----------------------------- CLI -------------------------------------------------------
def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Odds-balanced nontransitive dice cycle search")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable tagged progress output on stderr")
    parser.add_argument("--device", choices=["cpu", "cuda"], default=None,
                        help=f"Tensor device (default: {DEVICE.type})")
    args = parser.parse_args(argv)
    if args.device == "cuda" and not torch.cuda.is_available():
        parser.error("--device cuda requested but CUDA is not available")
    return args


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    device = torch.device(args.device) if args.device else DEVICE

    dice = build_universe()
    print(f"# of dice: {len(dice)}", file=sys.stderr)
    if args.verbose:
        print(f"[SETUP] faces={len(dice[0])} device={device}", file=sys.stderr)

    wins = build_odds_matrix(torch.tensor(dice, dtype=torch.int64, device=device))
    for i, cycle in enumerate(find_cycles(wins, verbose=args.verbose)):
        print_found(i, dice, cycle)
    return 0


if __name__ == "__main__":
    sys.exit(main())
