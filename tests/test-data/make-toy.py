"""
Generating toy data

13 isolates from 3 nurseries genotyped at 20 variants. Calls are written with a
constant read depth per isolate, so that the per-isolate depth quantiles do not
censor any call, except for the following designed cases:

- snp3: monomorphic, removed by the polymorphic stage
- snp4: a single heterozygous call (MAC = 1), removed by the MAC stage
- snp5: one call with depth 2, removed by the SNP missingness stage
- snp6: one call with depth 600, removed by the SNP missingness stage
- scaffold_2:4012: missing in every isolate
- S13: missing at 15 of 20 variants, removed by the first isolate missingness stage

S01 / S02, S05 / S06 and S09 / S10 are clones.
"""
import fire

SAMPLES = [f"S{i:02d}" for i in range(1, 14)]
DEPTH = [20, 25, 18, 30, 22, 27, 15, 35, 24, 19, 28, 21, 18]

# CHROM, POS, ID, REF, ALT, dosage per sample ("." missing, "d:dp" depth override)
VARIANTS = """
scaffold_1 1000 snp1 A G 1 1 1 2 0 0 0 0 0 0 1 0 0
scaffold_1 1250 snp2 C T 0 0 0 0 1 1 2 1 0 0 0 0 0
scaffold_1 1730 snp3 G A 0 0 0 0 0 0 0 0 0 0 0 0 .
scaffold_1 2104 snp4 T C 0 0 1 0 0 0 0 0 0 0 0 0 .
scaffold_1 2388 snp5 A C 0 0:2 0 0 1 1 1 1 0 0 0 0 .
scaffold_1 3012 snp6 G T 1 1 1 1 0 0 0:600 0 1 1 1 1 .
scaffold_1 3590 snp7 C G 0 0 0 0 0 0 0 0 1 1 1 2 1
scaffold_1 4121 snp8 T A 1 1 1 1 1 1 1 1 0 0 0 0 0
scaffold_1 4877 snp9 A G 2 2 1 2 0 0 0 1 0 0 0 0 0
scaffold_1 5230 snp10 G A 0 0 1 0 0 0 0 0 2 2 2 1 .
scaffold_2 210 . C T 1 1 1 1 1 1 0 1 1 1 1 1 .
scaffold_2 655 . A G 0 0 0 1 0 0 1 0 0 0 0 1 .
scaffold_2 1018 . T C 1 1 0 1 2 2 2 2 1 1 0 1 .
scaffold_2 1422 . G C 0 0 0 0 1 1 1 0 1 1 1 1 .
scaffold_2 1903 . C A 2 2 2 2 0 0 0 0 1 1 2 1 .
scaffold_2 2311 . A T 0 0 1 1 0 0 0 0 0 0 0 0 .
scaffold_2 2786 . G A 0 0 0 0 0 0 1 1 0 0 0 0 .
scaffold_2 3140 . T G 0 0 0 0 0 0 0 0 0 0 1 1 .
scaffold_2 3655 . C T 1 1 0 0 1 1 0 0 1 1 0 0 .
scaffold_2 4012 . A G . . . . . . . . . . . . .
"""

GT = {"0": "0/0", "1": "0/1", "2": "1/1"}


def make_vcf(out: str = "toy.vcf"):
    lines = [
        "##fileformat=VCFv4.2",
        "##source=pathopop-toy",
        "##contig=<ID=scaffold_1,length=10000>",
        "##contig=<ID=scaffold_2,length=10000>",
        '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
        '##FORMAT=<ID=DP,Number=1,Type=Integer,Description="Read depth">',
        "\t".join(
            ["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO", "FORMAT"]
            + SAMPLES
        ),
    ]
    for row in VARIANTS.strip().split("\n"):
        fields = row.split()
        record = fields[:5] + ["50", "PASS", ".", "GT:DP"]
        for tok, dp in zip(fields[5:], DEPTH):
            if ":" in tok:
                tok, dp = tok.split(":")
            if tok == ".":
                record.append("./.:0")
            else:
                record.append(f"{GT[tok]}:{dp}")
        lines.append("\t".join(record))
    with open(out, "w") as f:
        f.write("\n".join(lines) + "\n")


if __name__ == "__main__":
    fire.Fire(make_vcf)
