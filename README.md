# repshare

Three-party replicated secret sharing in Python with NumPy.

Each of three parties holds two of the three additive (or XOR) shares of a
value. A party's first share is its own and its second is the share of the
previous party, so any two parties together can rebuild the value but one
alone cannot.

## What is in the package

- `repshare.fixedpoint`: 64-bit fixed-point numbers (`Fixed`, `FixedMatrix`)
  with a `Decimal` precision of 0, 8, 16 or 32 fractional bits, their shared
  forms (`SharedFixed`, `SharedFixedMatrix`), and `format_fixed`, which
  prints a raw value as an exact decimal string.
- `repshare.sharing`: in-process channels linking the three parties
  (`Channel`, `CommPkg`, `connect_parties`), the correlated randomness source
  `ShareGen`, and the shared containers `SharedInt`, `SharedBinary`,
  `SharedIntMatrix`, `SharedBinMatrix` and `SharedPackedBin`.
- `repshare.encryptor`: `Encryptor` shares values a party knows
  (`local_int`, `local_binary`, `local_int_matrix`, `local_bin_matrix`,
  `local_packed_binary`), takes part in sharing values another party inputs
  (the matching `remote_*` methods), opens shares with `reveal`, `reveal_to`
  and `reveal_all`, and fills containers with random shared values via `rand`.
- `repshare.converter`: `to_packed_bin` and `to_binary_matrix` convert
  between row-packed binary shares and bit-sliced packed shares.
- `repshare.piecewise`: `Piecewise` evaluates a piecewise polynomial in the
  clear on raw fixed-point inputs (`eval_fixed`) or on floats (`eval_float`),
  built from `Coef` thresholds and coefficients; `input_regions` gives the
  one-hot region of each input. `fixed_mul` is the 128-bit fixed-point product
  it uses.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Fixed-point values

```python
from repshare.fixedpoint import Decimal, Fixed

a = Fixed.from_float(1.5, Decimal.D16)
b = Fixed.from_float(2.25, Decimal.D16)
print(a * b)          # 3.375
print(float(a + b))   # 3.75
```

## Sharing and revealing among three parties

The three parties run side by side, for example in three threads. Each one is
given its own `CommPkg` from `connect_parties()` and an `Encryptor` whose
previous seed equals the next seed of the party before it.

```python
import threading
from repshare.sharing import connect_parties
from repshare.encryptor import Encryptor

comms = connect_parties()
seeds = [11, 22, 33]
results = [None] * 3

def party(idx):
    enc = Encryptor(idx, seeds[(idx + 2) % 3], seeds[idx])
    comm = comms[idx]
    x = enc.local_int(comm, 42) if idx == 0 else enc.remote_int(comm)
    results[idx] = enc.reveal_all(comm, x)

threads = [threading.Thread(target=party, args=(i,)) for i in range(3)]
for t in threads:
    t.start()
for t in threads:
    t.join()

print(results)   # [42, 42, 42]
```

`Channel.recv` raises `TimeoutError` when a channel's `timeout` is set and no
message arrives in time.

## Piecewise functions

```python
from repshare.piecewise import Coef, Piecewise

# f(x) = 0 for x < 0, x for 0 <= x < 1, 1 for x >= 1
clip = Piecewise(
    thresholds=[Coef(0), Coef(1)],
    coefficients=[[], [Coef(0), Coef(1)], [Coef(1)]],
)
print(clip.eval_float([[-2.0], [0.5], [3.0]], 16))   # [[0.] [0.5] [1.]]
```

## What the package does not do

The package shares, opens and converts values, but it does not compute on
shared values beyond addition and subtraction of shares: there is no
multiplication of shared values, no fixed-point truncation protocol and no
evaluation of binary circuits over shares. `Piecewise` works only on plaintext
inputs. The parties talk over in-process queues only; there is no network
transport.