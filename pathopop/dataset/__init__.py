from ._dataset import Dataset
from ._load import load_toy, get_test_data_dir

# required columns in dset.snp
REQUIRED_SNP_COLUMNS = ["CHROM", "POS", "REF", "ALT"]

# sample identifier column of the metadata table
SAMPLE_COL = "Sample"
