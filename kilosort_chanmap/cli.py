import argparse

from .backend import create_channelmap_file, plot_channel_map
from .constants import SUPPORTED_LOCAL_PROBES
from .utils.chanmap import read_channelmap_file

parser = argparse.ArgumentParser(
    description="Create a Kilosort chanMap.mat file for a recording probe."
)

parser.add_argument(
    "save_path",
    type=str,
    nargs="?",
    default="",
    help="Folder where chanMap.mat is saved, typically the raw data folder.\n"
    "Defaults to the current working directory.",
)

parser.add_argument(
    "--metadata-file",
    "--metadata_file",
    type=str,
    default="",
    help="CellExplorer session.mat or Neuroscope xml file describing the probe.\n"
    "Ignored if --probe is given.",
)

parser.add_argument(
    "--probe",
    type=str,
    default="",
    choices=["", *SUPPORTED_LOCAL_PROBES],
    help="name of a probe with a built-in channel map.",
)

parser.add_argument(
    "--plot",
    action="store_true",
    help="If true, a PDF plot of the channel map is saved next to chanMap.mat.",
)


def main(argv=None):
    args = parser.parse_args(argv)

    chanmap_file, probe = create_channelmap_file(
        save_path=args.save_path,
        metadata_file=args.metadata_file,
        probe=args.probe,
    )

    if args.plot:
        plot_channel_map(
            read_channelmap_file(chanmap_file),
            title=f"{probe} channel map",
            save_plot=True,
            saveDir=chanmap_file.parent,
        )

    print(f"{probe}: {chanmap_file}")
    return chanmap_file, probe


if __name__ == "__main__":
    main()
