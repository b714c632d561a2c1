"""Shared test data for faiquery tests."""

# The example FASTA from the package documentation: 28 bases per line,
# one-byte line terminators, chr2 ending on a short final line.
CHR1_LINES = [
    'ACCTACGATCGACTGATCGTAGCTAGCT',
    'CATCGATCGTACGGACGATCGATCGGTT',
    'CACACCGGGCATGACTGATCGGGGGCCC',
    'ACGTGTGTGCAGCGCGCGGCGCGCGCGG',
]
CHR2_LINES = [
    'TTTTGATCGATCGGCGGGCGCGCGCGGC',
    'CAGATTCGGGCGCGATTATATATTAGCT',
    'CGACGGCGACTCGAGCTACACGTCGGGC',
    'GCGAGCGGGACGCGCGGCGCGCGCGGCC',
    'AAAAAAATTTTTATATATTATTACGCGC',
    'CGACTCAGTCGACTGGGGGCGCGCGCGC',
    'AAACCACA',
]
CHR1_SEQ = ''.join(CHR1_LINES)
CHR2_SEQ = ''.join(CHR2_LINES)

FASTA_CONTENT = (
    '>chr1\n'
    + ''.join(line + '\n' for line in CHR1_LINES)
    + '>chr2\n'
    + ''.join(line + '\n' for line in CHR2_LINES)
)

FAI_CONTENT = 'chr1\t112\t6\t28\t29\nchr2\t176\t128\t28\t29\n'

# Ten bases per line, eleven bytes per line, final line without terminator.
SHORT_FASTA = b'>seq\nACCTACGATC\nGGTTAACCGG'
SHORT_FAI = 'chr1\t20\t5\t10\t11\n'

# Windows line endings: two terminator bytes per line.
CRLF_FASTA = b'>s\r\nACGTA\r\nCCGGT\r\nTT\r\n'
CRLF_FAI = 's\t12\t4\t5\t7\n'
