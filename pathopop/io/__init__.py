from ._read import read_vcf, read_metadata, read_calls, read_dataset
from ._write import write_dataset, write_table, write_newick
