#!/usr/bin/env python

"""
This is a little benchmarking script to exercise bagr.create_bag with a
growing number of digest algorithms. It will generate some random files to
bag up the first time it is run.
"""

import os
import shutil
import timeit

import bagr

# generate some files to bag up

if not os.path.isdir("bench-data"):
    print("generating some files to bag up")
    os.mkdir("bench-data")
    for i in range(64):
        subdir = os.path.join("bench-data", "dir-%02d" % (i % 8))
        os.makedirs(subdir, exist_ok=True)
        with open(os.path.join(subdir, "file-%03d.bin" % i), "wb") as fh:
            fh.write(os.urandom(1024 * 1024))


# copy bench-data into a fresh bag using 1-6 algorithms

statement = """
import shutil
import bagr

shutil.rmtree('bench-bag', ignore_errors=True)
bagr.create_bag('bench-data', 'bench-bag', algorithms=%r)
"""

algorithms = [str(i) for i in bagr.DigestAlgorithm]

for n in range(1, len(algorithms) + 1):
    t = timeit.Timer(statement % (algorithms[:n],))
    print(("create w/ %s: %.2f seconds " % (", ".join(algorithms[:n]), t.timeit(number=3) / 3)))


# rebag with payload recalculation

statement = """
import bagr

bagr.open_bag('bench-bag').update().finalize()
"""

t = timeit.Timer(statement)
print(("rebag: %.2f seconds " % (t.timeit(number=3) / 3)))

shutil.rmtree("bench-bag")
